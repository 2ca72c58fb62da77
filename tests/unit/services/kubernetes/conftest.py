"""Shared fixtures for Kubernetes store tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from bw_secrets_operator.integrations.kubernetes.client import KubernetesClient


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client.

    ``core_v1`` and ``custom_objects`` are auto-created sub-mocks;
    ``translate_api_exception`` uses the real translation so stores raise
    the same errors they would against a cluster.
    """
    mock_client = MagicMock()
    mock_client.timeout = 30
    mock_client.watch_namespace = None
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    return mock_client
