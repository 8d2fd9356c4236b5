from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-only-not-secure"

# File backed so worker threads in the concurrency tests share one database
DATABASES["default"]["NAME"] = str(BASE_DIR / "adserver_test.sqlite3")  # noqa: F405
DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_adserver.sqlite3")}  # noqa: F405

AD_BUDGET_SECONDS = 300
AD_BUDGET_WINDOW_SECONDS = 3600
VAST_IMPRESSION_URL = ""

LOGGING["loggers"]["apps"]["level"] = "WARNING"  # noqa: F405
