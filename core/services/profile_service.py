"""Company profile settings."""

from core.audit import AuditAction, AuditLogger, compute_changes
from core.models import CompanyProfile, CompanyProfileUpdate
from core.repositories import ProfileRepository
from utils.user_context import get_current_user_id


class ProfileService:
    def __init__(self, profiles: ProfileRepository, audit: AuditLogger):
        self.profiles = profiles
        self.audit = audit

    def get(self) -> CompanyProfile | None:
        """Profile of the current user, or None before first save."""
        return self.profiles.get(get_current_user_id())

    def save(self, data: CompanyProfileUpdate) -> CompanyProfile:
        """
        Create or replace the profile.

        Existing invoices keep the snapshot they were created with.
        """
        user_id = get_current_user_id()
        previous = self.profiles.get(user_id)
        profile = self.profiles.upsert(user_id, data)

        if previous is None:
            action = AuditAction.CREATE
            changes = {"created": profile.model_dump(mode="json", exclude={"user_id", "updated_at"})}
        else:
            action = AuditAction.UPDATE
            changes = compute_changes(previous.model_dump(mode="json"), profile.model_dump(mode="json"))

        if changes:
            self.audit.log_change(
                entity_type="company_profile",
                entity_id=user_id,
                action=action,
                changes=changes,
            )
        return profile
