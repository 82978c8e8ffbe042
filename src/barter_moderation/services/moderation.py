"""Moderator action executor.

Applies remediations (content removal, bans, warnings, dismissals) and writes
one ``moderation_actions`` audit row per invocation. When a remediation is
tied to a report, the target mutation, the audit row and the report's
terminal transition commit in one transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import (
    DependencyError,
    ModerationError,
    NotFoundError,
    ValidationError,
)
from barter_moderation.db.time import utcnow
from barter_moderation.models import Item, Message, ModerationAction, Report, User
from barter_moderation.models.item import ITEM_STATUS_REMOVED
from barter_moderation.models.moderation import ModerationActionType
from barter_moderation.models.report import ReportStatus, ReportTargetType
from barter_moderation.services import reports as report_service

logger = logging.getLogger(__name__)

_ACTION_TYPES = {member.value for member in ModerationActionType}
_TARGET_TYPES = {member.value for member in ReportTargetType}
REMOVABLE_TARGETS = frozenset({ReportTargetType.ITEM, ReportTargetType.MESSAGE})


class ModerationService:
    """Service executing moderator remediations against targets and reports."""

    @staticmethod
    def _validate(action_type: str, target_type: str, target_id: str) -> None:
        if action_type not in _ACTION_TYPES:
            raise ValidationError("Invalid action")
        if target_type not in _TARGET_TYPES or not target_id:
            raise ValidationError("Missing required fields: targetType, targetId")
        if action_type == ModerationActionType.BAN_USER and target_type != ReportTargetType.USER:
            raise ValidationError("Invalid target type for ban_user action")
        if (
            action_type == ModerationActionType.REMOVE_CONTENT
            and target_type not in REMOVABLE_TARGETS
        ):
            raise ValidationError("Invalid target type for remove_content action")

    @staticmethod
    def _remove_content(db: Session, target_type: str, target_id: str, now: datetime) -> bool:
        """Mark an item or message as removed. Returns False when nothing changed."""
        if target_type == ReportTargetType.ITEM:
            result = db.execute(
                update(Item)
                .where(Item.id == target_id, Item.removed_at.is_(None))
                .values(removed_at=now, status=ITEM_STATUS_REMOVED)
                .execution_options(synchronize_session=False)
            )
            model: type[Item] | type[Message] = Item
        else:
            result = db.execute(
                update(Message)
                .where(Message.id == target_id, Message.removed_at.is_(None))
                .values(removed_at=now)
                .execution_options(synchronize_session=False)
            )
            model = Message

        if result.rowcount:
            return True
        if db.get(model, target_id) is None:
            logger.warning("%s %s not found; treating removal as done", target_type, target_id)
        else:
            logger.debug("%s %s already removed", target_type, target_id)
        return False

    @staticmethod
    def _ban_user(db: Session, user_id: str, reason: str | None, now: datetime) -> bool:
        """Ban ``user_id``. Returns False when the account was already banned."""
        result = db.execute(
            update(User)
            .where(User.id == user_id, User.banned_at.is_(None))
            .values(banned_at=now, ban_reason=reason)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return True
        if db.get(User, user_id) is None:
            raise NotFoundError("User not found")
        logger.debug("User %s already banned", user_id)
        return False

    @classmethod
    def _execute(
        cls,
        db: Session,
        *,
        action_type: str,
        target_type: str,
        target_id: str,
        moderator_id: str,
        report_id: str | None,
        notes: str | None,
        now: datetime,
    ) -> ModerationAction:
        """Stage the target mutation and its audit row without committing."""
        changed = False
        if action_type == ModerationActionType.REMOVE_CONTENT:
            changed = cls._remove_content(db, target_type, target_id, now)
        elif action_type == ModerationActionType.BAN_USER:
            changed = cls._ban_user(db, target_id, notes, now)
        # dismiss_report and warn_user only leave the audit entry.

        entry = ModerationAction(
            moderator_id=moderator_id,
            action_type=action_type,
            target_type=target_type,
            target_id=target_id,
            report_id=report_id,
            notes=notes or None,
            created_at=now,
        )
        db.add(entry)
        logger.info(
            "%s on %s %s by %s (changed=%s)",
            action_type,
            target_type,
            target_id,
            moderator_id,
            changed,
        )
        return entry

    @classmethod
    def apply_action(
        cls,
        db: Session,
        *,
        action_type: str,
        target_type: str,
        target_id: str,
        moderator_id: str,
        report_id: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> ModerationAction:
        """Apply a remediation and record it.

        ``remove_content`` and ``ban_user`` are idempotent: repeating them is
        not an error and only adds another audit row. ``dismiss_report``
        needs a report and is routed through :meth:`resolve_report`.

        Raises:
            ValidationError: On an unknown action or a target type the action
                does not support.
            NotFoundError: When banning an unknown user or dismissing an
                unknown report.
            DependencyError: If the store rejects the write.
        """
        cls._validate(action_type, target_type, target_id)
        if action_type == ModerationActionType.DISMISS_REPORT:
            if not report_id:
                raise ValidationError(
                    "Missing required field: reportId (required for dismiss_report)"
                )
            _, entry = cls.resolve_with_audit(
                db,
                report_id=report_id,
                action_type=action_type,
                target_type=target_type,
                target_id=target_id,
                moderator_id=moderator_id,
                notes=notes,
                now=now,
                commit=True,
            )
            return entry

        moment = now or utcnow()
        try:
            entry = cls._execute(
                db,
                action_type=action_type,
                target_type=target_type,
                target_id=target_id,
                moderator_id=moderator_id,
                report_id=report_id,
                notes=notes,
                now=moment,
            )
            db.commit()
        except ModerationError:
            db.rollback()
            raise
        except SQLAlchemyError as err:
            db.rollback()
            logger.warning(
                "Failed to apply %s on %s %s: %s", action_type, target_type, target_id, err
            )
            raise DependencyError(f"Failed to apply {action_type}") from err
        return entry

    @classmethod
    def resolve_report(
        cls,
        db: Session,
        *,
        report_id: str,
        action_type: str,
        target_type: str,
        target_id: str,
        moderator_id: str,
        notes: str | None = None,
        now: datetime | None = None,
        commit: bool = True,
    ) -> Report:
        """Remediate and close a report as one unit.

        ``dismiss_report`` closes the report as ``dismissed``; every other
        action closes it as ``resolved``. Either everything is committed or
        nothing is.

        Args:
            commit: When False the caller commits; a failure still rolls
                the session back.

        Raises:
            NotFoundError: If the report does not exist.
            InvalidStateError: If the report is already closed or another
                moderator closed it concurrently.
            ValidationError: On invalid input, including resolving without notes.
            DependencyError: If the store rejects the write.
        """
        report, _ = cls.resolve_with_audit(
            db,
            report_id=report_id,
            action_type=action_type,
            target_type=target_type,
            target_id=target_id,
            moderator_id=moderator_id,
            notes=notes,
            now=now,
            commit=commit,
        )
        return report

    @classmethod
    def resolve_with_audit(
        cls,
        db: Session,
        *,
        report_id: str,
        action_type: str,
        target_type: str,
        target_id: str,
        moderator_id: str,
        notes: str | None = None,
        now: datetime | None = None,
        commit: bool = True,
    ) -> tuple[Report, ModerationAction]:
        """Same as :meth:`resolve_report`, also returning the audit entry."""
        cls._validate(action_type, target_type, target_id)
        report = report_service.get_report(db, report_id)
        new_status = (
            ReportStatus.DISMISSED.value
            if action_type == ModerationActionType.DISMISS_REPORT
            else ReportStatus.RESOLVED.value
        )
        moment = now or utcnow()

        try:
            entry = cls._execute(
                db,
                action_type=action_type,
                target_type=target_type,
                target_id=target_id,
                moderator_id=moderator_id,
                report_id=report.id,
                notes=notes,
                now=moment,
            )
            report_service.apply_transition(
                db,
                report,
                new_status,
                resolved_by=moderator_id,
                resolution_notes=notes,
                now=moment,
            )
            if commit:
                db.commit()
        except ModerationError:
            db.rollback()
            raise
        except SQLAlchemyError as err:
            db.rollback()
            logger.warning("Failed to resolve report %s with %s: %s", report_id, action_type, err)
            raise DependencyError("Failed to update report") from err

        if commit:
            db.refresh(report)
        return report, entry

    @staticmethod
    def list_actions(
        db: Session,
        *,
        report_id: str | None = None,
        limit: int = 50,
    ) -> list[ModerationAction]:
        """Return audit entries newest first, optionally for one report."""
        query = select(ModerationAction).order_by(
            ModerationAction.created_at.desc(),
            ModerationAction.id,
        )
        if report_id is not None:
            query = query.where(ModerationAction.report_id == report_id)
        try:
            return list(db.scalars(query.limit(limit)).all())
        except SQLAlchemyError as err:
            raise DependencyError("Failed to load moderation actions") from err
