from flask import request, g
from domaincms.utils.countries import COUNTRY_COOKIE, configured_default_country, normalize_country_code


def country_middleware(app):
    @app.before_request
    def load_user_country():
        # Malformed cookie values fall back to the configured default
        g.user_country = normalize_country_code(
            request.cookies.get(COUNTRY_COOKIE),
            default=configured_default_country(),
        )
