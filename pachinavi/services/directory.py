"""Company directory backed by configured profiles."""

from typing import Optional

from pachinavi.models import Party
from pachinavi.services.ports import IdentityDirectory


class ConfigDirectory(IdentityDirectory):
    """Resolves company names from the ``[companies]`` config tables."""

    def __init__(self, companies: Optional[dict[str, Party]] = None):
        self._companies = dict(companies or {})

    def company_name(self, user_id: str) -> Optional[str]:
        profile = self._companies.get(user_id)
        return profile.company_name if profile else None

    def profile(self, user_id: str) -> Optional[Party]:
        """Get the full company profile of a user."""
        return self._companies.get(user_id)
