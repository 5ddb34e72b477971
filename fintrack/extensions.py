"""Flask extension singletons, bound to an app in init_extensions."""

from pathlib import Path

from flask_bcrypt import Bcrypt
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Committed instances stay loaded; services serialise them after commit.
db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate()
jwt = JWTManager()
bcrypt = Bcrypt()
# RATELIMIT_ENABLED / RATELIMIT_DEFAULT / RATELIMIT_STORAGE_URI come from app config.
limiter = Limiter(key_func=get_remote_address)


def init_extensions(app) -> None:
    db.init_app(app)
    migrate.init_app(app, db, directory=str(Path(__file__).resolve().parent / "migrations"))
    jwt.init_app(app)
    bcrypt.init_app(app)
    limiter.init_app(app)

    from fintrack.domains.finance.services.abuse_guard import abuse_guard

    abuse_guard.init_app(app)
