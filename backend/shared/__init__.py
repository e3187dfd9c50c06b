"""
Shared module for the Bocatto REST API.

STRUCTURE:
- shared.security: Authentication, passwords, two-factor, rate limiting
  - auth.py: JWT signing/verification, session cookie helpers
  - password.py: Bcrypt hashing
  - totp.py: TOTP secrets, QR codes, backup codes
  - rate_limit.py: Login rate limiting (slowapi)

- shared.infrastructure: Database, request correlation, image storage
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and log filter
  - storage.py: Cloudinary uploads

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, statuses, business constants

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation helpers
  - *_schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, sign_session_token
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
"""
