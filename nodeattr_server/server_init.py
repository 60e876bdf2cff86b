import logging
import os
import sys
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy
import flask.app


class NodeattrServer:
    """This class configures the Flask application to serve the inventory resources
    :param app: a Flask application.
    :param prefix: URL prefix where the resources are hosted. Default is ''
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    API_PREFIX = ""
    LOGLEVEL = logging.WARNING
    JWT_ALGORITHM = "HS256"
    # Claim in the bearer token that grants administrative privilege
    ADMIN_CLAIM = "admin"
    #
    config = {}

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, prefix: str = "", app_db: SQLAlchemy = None, **kwargs) -> None:
        """
        Database, token validation and logging initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app_db is None:
            app_db = DB
        if "sqlalchemy" not in app.extensions:
            app_db.init_app(app)
        self.db = app_db

        if "flask-jwt-extended" not in app.extensions:
            JWTManager(app)

        app.url_map.strict_slashes = False

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        NodeattrServer.API_PREFIX = prefix

        for conf_name, conf_val in kwargs.items():
            setattr(NodeattrServer, conf_name, conf_val)

        for conf_name, conf_val in app.config.items():
            setattr(NodeattrServer, conf_name, conf_val)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. http://flask.pocoo.org/docs/0.12/patterns/sqlalchemy/"""
            self.db.session.remove()

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stderr so we redirect eveything to sys.stderr
        """
        log = logging.getLogger(__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = NodeattrServer.init_logging(LOGLEVEL)
