"""
Tests for libs/secrets/factory.py - store and retriever construction.
"""

from datetime import timedelta
from unittest.mock import MagicMock, Mock, patch

import pytest

from libs.secrets.aws_backend import AWSSecretStore
from libs.secrets.env_backend import EnvSecretStore
from libs.secrets.exceptions import SecretManagerError
from libs.secrets.factory import create_secret_retriever, create_secret_store
from libs.secrets.retriever import SecretRetriever


class TestCreateSecretStore:
    @pytest.mark.unit()
    @patch("libs.secrets.aws_backend.boto3.client")
    def test_aws_backend(self, mock_boto_client: Mock) -> None:
        store = create_secret_store(backend="AWS", region_name="ap-south-1")

        assert isinstance(store, AWSSecretStore)
        assert store.region_name == "ap-south-1"
        assert mock_boto_client.call_args.kwargs["region_name"] == "ap-south-1"

    @pytest.mark.unit()
    @pytest.mark.parametrize("env", ["local", "development", "test"])
    def test_env_backend_in_local_environments(self, env: str) -> None:
        assert isinstance(create_secret_store(backend="env", deployment_env=env), EnvSecretStore)

    @pytest.mark.unit()
    @pytest.mark.parametrize("env", ["staging", "production"])
    def test_env_backend_refused_outside_local(self, env: str) -> None:
        with pytest.raises(SecretManagerError, match=f"not allowed in {env}"):
            create_secret_store(backend="env", deployment_env=env)

    @pytest.mark.unit()
    def test_invalid_backend(self) -> None:
        with pytest.raises(SecretManagerError, match="Invalid SECRET_BACKEND: 'vault'"):
            create_secret_store(backend="vault")


class TestCreateSecretRetriever:
    @pytest.mark.unit()
    def test_uses_given_store_and_ttl(self, fake_store, clock) -> None:
        retriever = create_secret_retriever(
            store=fake_store, cache_ttl=timedelta(seconds=30), clock=clock
        )

        assert isinstance(retriever, SecretRetriever)
        assert retriever.store is fake_store
        assert retriever.cache.ttl == timedelta(seconds=30)

    @pytest.mark.unit()
    @patch("libs.secrets.factory.create_secret_store")
    def test_builds_store_from_kwargs(self, mock_create_store: Mock) -> None:
        mock_create_store.return_value = MagicMock(backend="aws")

        retriever = create_secret_retriever(backend="aws", region_name="us-west-2")

        mock_create_store.assert_called_once_with(backend="aws", region_name="us-west-2")
        assert retriever.store is mock_create_store.return_value
