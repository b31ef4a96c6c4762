# src/dbcheck/core/base_provider.py
"""
Abstract control plane used by the discovery core.

┌─────────────────────────────────────────────────────────────┐
│                    Snapshot Assembler                       │
│   (core/assembler.py — DNS → locate → aggregate)            │
└────────────────────────┬────────────────────────────────────┘
                         │  uses
                         ▼
             ┌──────────────────────┐
             │   BaseControlPlane   │  ◄── You implement this
             │   (this module)      │       per provider
             └──────────────────────┘
                         ▲
                         │ implements
              ┌─────────────────────┐
              │ AWSControlPlane     │
              │ (adapters/aws/…)    │
              └─────────────────────┘

Implementations own the SDK clients and translate SDK errors into
ProviderFailure. They return raw describe payloads (dicts keyed the way the
provider's API documents them); interpretation happens in the core.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import ParameterPage


class BaseControlPlane(ABC):

    provider_name: str = ""

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @abstractmethod
    def get_account_id(self) -> str:
        """
        Account dbcheck runs in: the configured one, else the caller
        identity of the credentials. Raises ProviderFailure when the identity
        call fails and ConfigurationError when no account can be resolved;
        never returns an empty string.
        """
        ...

    # ------------------------------------------------------------------
    # DNS
    # ------------------------------------------------------------------
    @abstractmethod
    def list_hosted_zones(self) -> list[dict]:
        """All hosted zones visible to the credentials, every page drained."""
        ...

    @abstractmethod
    def list_resource_record_sets(self, zone_id: str) -> list[dict]:
        ...

    # ------------------------------------------------------------------
    # Database clusters
    # ------------------------------------------------------------------
    @abstractmethod
    def list_db_clusters(self) -> list[dict]:
        ...

    @abstractmethod
    def describe_db_instance(self, identifier: str) -> dict:
        ...

    @abstractmethod
    def cluster_parameter_page(self, group_name: str, marker: Optional[str] = None) -> ParameterPage:
        """One page of user-modified parameters of a cluster parameter group."""
        ...

    @abstractmethod
    def db_parameter_page(self, group_name: str, marker: Optional[str] = None) -> ParameterPage:
        """One page of user-modified parameters of an instance parameter group."""
        ...

    # ------------------------------------------------------------------
    # Identity & access
    # ------------------------------------------------------------------
    @abstractmethod
    def list_attached_role_policies(self, role_name: str) -> list[dict]:
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider_name!r}>"
