from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tooldocgen.naming import BrandMapping, NameContext


@pytest.fixture(autouse=True)
def _reset_tooldocgen_logger() -> Iterator[None]:
    """Undo configure_logging() side effects so caplog sees every record."""
    yield
    logger = logging.getLogger("tooldocgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def name_context() -> NameContext:
    """Small lookup tables covering brand, compound and stop-word handling."""
    return NameContext.build(
        brands=[
            BrandMapping(
                server_name="aks",
                brand_name="Azure Kubernetes Service",
                short_name="AKS",
                file_slug="azure-kubernetes-service",
            ),
            BrandMapping(
                server_name="cosmos",
                brand_name="Azure Cosmos DB",
                short_name="Cosmos DB",
                file_slug="cosmos-db",
            ),
            BrandMapping(server_name="monitor", brand_name="Azure Monitor", file_slug=""),
        ],
        compound_words={"nodepool": "node-pool", "appconfig": "app-config", "ofthe": "of-the"},
        stop_words=["the", "of", "a"],
    )


@pytest.fixture
def empty_context() -> NameContext:
    return NameContext()
