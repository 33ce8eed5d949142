"""Trade lifecycle service and its collaborator interfaces."""

from pachinavi.services.directory import ConfigDirectory
from pachinavi.services.lifecycle import Statement, TradeLifecycleService
from pachinavi.services.ports import IdentityDirectory, MessageSource, TradeStore

__all__ = [
    "ConfigDirectory",
    "IdentityDirectory",
    "MessageSource",
    "Statement",
    "TradeLifecycleService",
    "TradeStore",
]
