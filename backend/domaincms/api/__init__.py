from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import route modules so they register with api_bp
from . import health
from . import auth
from . import categories
from . import domains
from . import pages
from . import sections
from . import tables
from . import rich_text
from . import users
from . import navigation
from . import public
