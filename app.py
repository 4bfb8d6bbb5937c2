import os
from flask import Flask
from config import Config
from extensions import init_extensions
from logger import configure_app_logging


# --------------------------------------------------------------------------------------------------------
#       Application factory
# --------------------------------------------------------------------------------------------------------
def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # ----------------------------------------------------------------------------------------------------
    # Logging
    # ----------------------------------------------------------------------------------------------------
    configure_app_logging(app)

    # ----------------------------------------------------------------------------------------------------
    # DATABASE URI Fix
    # ----------------------------------------------------------------------------------------------------
    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if database_uri and database_uri.startswith("sqlite:///") and ":memory:" not in database_uri:
        os.makedirs(os.path.dirname(database_uri.replace("sqlite:///", "", 1)), exist_ok=True)

    # ----------------------------------------------------------------------------------------------------
    # Initialize extensions
    # ----------------------------------------------------------------------------------------------------
    init_extensions(app)

    # Models must be imported before create_all / migrations see the metadata
    import models  # noqa: F401

    # ----------------------------------------------------------------------------------------------------
    # CLI commands
    # ----------------------------------------------------------------------------------------------------
    from commands import commissions_cli
    app.cli.add_command(commissions_cli)

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    app.logger.info(f"Application started with {config_class.__name__}")
    return app


# ----------------------
# Local development
# ----------------------
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=port)
