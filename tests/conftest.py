"""Root test configuration."""

import json
import logging

import pytest
import structlog
from vcap_services.resolver import CredentialResolver
from vcap_services.sources import EnvironmentSnapshot, parse_catalog

CREDENTIALS = {
    "password": "<password>",
    "url": "<url>",
    "username": "<username>",
    "api_key": "<api_key>",
}
REDIS = {"name": "Compose for Redis-ov"}
NOSQL_X5 = {"name": "Cloudant NoSQL DB-x5"}
NOSQL_X6 = {"name": "Cloudant NoSQL DB-x6"}


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def catalog_data():
    """Raw service catalog as found in VCAP_SERVICES."""
    return {
        "personality_insights": [
            {"plan": "not-a-plan"},
            {"credentials": {}, "plan": "beta"},
            {"credentials": CREDENTIALS, "plan": "standard"},
        ],
        "retrieve_and_rank": [
            {
                "name": "retrieve-and-rank-standard",
                "label": "retrieve_and_rank",
                "plan": "standard",
                "credentials": CREDENTIALS,
            }
        ],
        "natural_language_classifier": [
            {"name": "NLC 1", "plan": "standard", "credentials": CREDENTIALS},
            {"name": "NLC 2", "plan": "standard", "credentials": CREDENTIALS},
        ],
        "object_storage": [
            {"name": "OS 1", "plan": "standard", "credentials": CREDENTIALS, "tags": ["eu"]},
            {"name": "OS 2", "plan": "standard", "credentials": CREDENTIALS, "tags": ["us"]},
        ],
    }


@pytest.fixture
def catalog(catalog_data):
    """Parsed service catalog."""
    return parse_catalog(json.dumps(catalog_data))


@pytest.fixture
def entries():
    """Individual environment entries, as strings."""
    return {
        "CLOUDANT_NOSQL_DB_X5": json.dumps(NOSQL_X5),
        "CLOUDANT_NOSQL_DB_X6": json.dumps(NOSQL_X6),
        "COMPOSE_FOR_REDIS_OV": json.dumps(REDIS),
        "CONVERSATION_W1": json.dumps(CREDENTIALS),
        "OBJECT_STORAGE_6J": "Not JSON",
        "weather_company_data_wu": json.dumps({"name": "weather-company_data_wu"}),
    }


@pytest.fixture
def environ(catalog_data, entries):
    """Environment mapping holding the catalog and the individual entries."""
    return {"VCAP_SERVICES": json.dumps(catalog_data), **entries}


@pytest.fixture
def resolver(environ):
    """Resolver over the test environment."""
    return CredentialResolver(EnvironmentSnapshot.from_environ(environ))


@pytest.fixture
def credentials():
    return dict(CREDENTIALS)


@pytest.fixture
def redis():
    return dict(REDIS)


@pytest.fixture
def nosql_x5():
    return dict(NOSQL_X5)


@pytest.fixture
def nosql_x6():
    return dict(NOSQL_X6)
