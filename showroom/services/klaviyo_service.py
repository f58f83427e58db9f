"""
Klaviyo Integration Service for the bridal showroom.

Fires behavioral events that drive the bridal party email flows. Klaviyo
renders and sends the emails; this service only reports what happened.

API Documentation: https://developers.klaviyo.com/en/reference/api_overview
API Revision: 2024-10-15
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from ..utils import utc_now_iso

logger = logging.getLogger(__name__)


class KlaviyoService:
    """
    Klaviyo API integration for bridal party emails.

    Every call is best effort: failures come back as
    ``{'success': False, 'error': ...}`` and are never raised.
    """

    BASE_URL = "https://a.klaviyo.com/api"
    API_REVISION = "2024-10-15"

    def __init__(self, api_key: Optional[str], invite_event: str = 'Bridal Party Invited', site_url: str = ''):
        self.api_key = api_key
        self.invite_event = invite_event
        self.site_url = (site_url or '').rstrip('/')

    @classmethod
    def from_settings(cls, settings) -> 'KlaviyoService':
        return cls(settings.klaviyo_api_key, settings.klaviyo_invite_event, settings.site_url)

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for Klaviyo API requests."""
        return {
            "Authorization": f"Klaviyo-API-Key {self.api_key}",
            "revision": self.API_REVISION,
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

    def is_enabled(self) -> bool:
        return bool(self.api_key)

    # ==================== EVENT TRACKING ====================

    def track_event(
        self,
        event_name: str,
        email: str,
        properties: Dict[str, Any],
        profile: Dict[str, Any] = None,
        unique_id: str = None
    ) -> Dict[str, Any]:
        """
        Track a custom event in Klaviyo.

        Args:
            event_name: Metric name (e.g., 'Bridal Party Invited')
            email: Customer email
            properties: Event properties
            profile: Extra profile attributes (first_name, last_name, properties)
            unique_id: Unique event ID for deduplication

        Returns:
            Dict with tracking status
        """
        if not self.is_enabled():
            logger.info('Klaviyo API key not configured, skipping %s event', event_name)
            return {'success': False, 'error': 'Klaviyo not configured'}

        profile_attributes = {'email': email}
        if profile:
            profile_attributes.update({k: v for k, v in profile.items() if v is not None})

        payload = {
            "data": {
                "type": "event",
                "attributes": {
                    "metric": {
                        "data": {
                            "type": "metric",
                            "attributes": {
                                "name": event_name
                            }
                        }
                    },
                    "profile": {
                        "data": {
                            "type": "profile",
                            "attributes": profile_attributes
                        }
                    },
                    "properties": properties,
                    "time": utc_now_iso()
                }
            }
        }

        if unique_id:
            payload['data']['attributes']['unique_id'] = unique_id

        try:
            response = requests.post(
                f"{self.BASE_URL}/events/",
                headers=self._get_headers(),
                json=payload,
                timeout=10
            )

            if response.status_code in [200, 201, 202]:
                logger.info('Klaviyo event %s tracked for %s', event_name, email)
                return {
                    'success': True,
                    'event': event_name,
                    'message': 'Event tracked'
                }

            logger.error('Klaviyo API error %s: %s', response.status_code, response.text)
            return {
                'success': False,
                'error': f'API error: {response.status_code}',
                'details': response.text
            }

        except requests.exceptions.RequestException as e:
            logger.error(f"Klaviyo event tracking failed: {e}")
            return {'success': False, 'error': str(e)}

    # ==================== BRIDAL PARTY EVENTS ====================

    def track_bridal_party_invited(
        self,
        email: str,
        first_name: str,
        last_name: str,
        activation_url: Optional[str] = None,
        showroom_id: Optional[str] = None,
        bride_name: Optional[str] = None,
        wedding_date: Optional[str] = None,
        roles: Optional[List[str]] = None,
        invite_date: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fire the invite event that sends the activation email flow."""
        invite_date = invite_date or utc_now_iso()

        profile = {
            'first_name': first_name,
            'last_name': last_name,
            'properties': {
                'Bridal Party Member': True,
                'Showroom ID': showroom_id or '',
                'Bride Name': bride_name or '',
                'Wedding Date': wedding_date or '',
                'Invite Date': invite_date,
                'Account Status': 'invited',
                'Activation Email Sent': True,
            }
        }

        properties = {
            'activation_url': activation_url or '',
            'bride_name': bride_name or '',
            'wedding_date': wedding_date or '',
            'showroom_url': f'{self.site_url}/pages/showroom',
            'invite_date': invite_date,
            'roles': ', '.join(roles or []),
            'customer_created': True,
        }

        return self.track_event(self.invite_event, email, properties, profile=profile)
