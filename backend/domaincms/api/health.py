from flask import jsonify
from sqlalchemy import text
from domaincms.extensions import db
from . import api_bp


@api_bp.route("/health", methods=["GET"])
def health_check():
    db.session.execute(text("SELECT 1"))
    return jsonify({
        "status": "ok",
        "service": "domaincms",
    })
