# Middleware package
from poiquery.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from poiquery.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from poiquery.middleware.security import SecurityHeadersMiddleware
