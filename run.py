"""
Bridal showroom service entry point.
"""
import os
import sys
import traceback

# Default to production for deployment
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[Showroom] Config: {config_name}")
print(f"[Showroom] PORT: {os.getenv('PORT', 'not set')}")
print(f"[Showroom] SHOPIFY_SHOP_DOMAIN: {'set' if os.getenv('SHOPIFY_SHOP_DOMAIN') else 'NOT SET'}")

try:
    from showroom import create_app
    app = create_app(config_name)
    print(f"[Showroom] Routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[Showroom] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
