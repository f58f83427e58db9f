"""
Tests for the showroom exception hierarchy.
"""
from showroom.utils.errors import ErrorCode
from showroom.utils.exceptions import (
    ConfigurationError,
    CustomerNotFoundError,
    ShopifyError,
    ValidationError,
)


class TestErrorCodes:
    """Exception codes line up with the API error codes."""

    def test_validation_error_without_field(self):
        error = ValidationError('Request body must be a JSON object')

        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.status_code == 400

    def test_validation_error_with_field(self):
        assert ValidationError('roles must be a list of strings', field='roles').code == 'INVALID_ROLES'

    def test_customer_not_found(self):
        error = CustomerNotFoundError('amy@example.com')

        assert error.code == ErrorCode.CUSTOMER_NOT_FOUND
        assert error.message == 'Customer amy@example.com not found'
        assert error.status_code == 404

    def test_shopify_error(self):
        error = ShopifyError('Customer create failed', status=422)

        assert error.code == ErrorCode.SHOPIFY_ERROR
        assert error.upstream_status == 422
        assert error.status_code == 500

    def test_configuration_error(self):
        assert ConfigurationError('SHOPIFY_DOMAIN is required').code == ErrorCode.CONFIGURATION_ERROR
