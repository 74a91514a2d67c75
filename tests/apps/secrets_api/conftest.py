"""Fixtures for Secrets API endpoint tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.secrets_api.config import Settings
from apps.secrets_api.main import create_app
from libs.secrets.retriever import SecretRetriever


def _make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {"environment": "test"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Settings factory isolated from any .env file in the working directory."""
    return _make_settings


@pytest.fixture()
def app(retriever: SecretRetriever) -> FastAPI:
    return create_app(settings=_make_settings(), retriever=retriever)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
