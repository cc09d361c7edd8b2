"""
Standard operating procedure management on top of the key-value store.

All procedures live as one JSON list under ``SOP_KEY``.
"""

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from kushl.pricing import TASK_CATEGORIES
from kushl.shared.exceptions import SopNotFoundError, StorageError
from kushl.shared.logging import get_logger
from kushl.sops.models import SopCreate, SopUpdate, StandardOperatingProcedure
from kushl.storage.store import KeyValueStore
from kushl.tasks.events import Clock, IdFactory, utc_now
from kushl.tasks.models import generate_id

logger = get_logger(__name__)

SOP_KEY = "kushl_standard_operating_procedures"

_sops_adapter = TypeAdapter(list[StandardOperatingProcedure])


class SopService:
    """CRUD and category coverage for standard operating procedures."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock = utc_now,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory

    def list_sops(self) -> list[StandardOperatingProcedure]:
        """Load every stored procedure in insertion order.

        Raises:
            StorageError: The stored list does not describe valid procedures.
        """
        raw = self._store.get(SOP_KEY, default=[])
        try:
            return _sops_adapter.validate_python(raw)
        except PydanticValidationError as exc:
            logger.error(
                "Stored procedures failed validation",
                extra={"key": SOP_KEY, "errors": exc.error_count()},
            )
            raise StorageError(
                "Stored procedures are malformed",
                details={"key": SOP_KEY, "errors": exc.errors(include_url=False)},
            ) from exc

    def _save(self, sops: list[StandardOperatingProcedure]) -> None:
        self._store.set(SOP_KEY, [sop.to_document() for sop in sops])

    def get_sop(self, sop_id: str) -> StandardOperatingProcedure | None:
        return next((sop for sop in self.list_sops() if sop.id == sop_id), None)

    def get_sops_by_category(self, category: str) -> list[StandardOperatingProcedure]:
        return [sop for sop in self.list_sops() if sop.category == category]

    def add_sop(self, data: SopCreate) -> StandardOperatingProcedure:
        sops = self.list_sops()
        now = self._clock()
        sop = StandardOperatingProcedure(
            id=self._id_factory(),
            category=data.category,
            title=data.title,
            content=data.content,
            created_at=now,
            updated_at=now,
            created_by=data.created_by,
            creator_name=data.creator_name,
        )
        sops.append(sop)
        self._save(sops)
        logger.info("Procedure added", extra={"sop_id": sop.id, "category": sop.category})
        return sop

    def update_sop(self, sop_id: str, data: SopUpdate) -> StandardOperatingProcedure:
        """Apply the set fields of ``data`` and refresh ``updatedAt``.

        Raises:
            SopNotFoundError: No procedure has this id.
        """
        sops = self.list_sops()
        sop = next((s for s in sops if s.id == sop_id), None)
        if sop is None:
            raise SopNotFoundError(sop_id)
        for name in data.model_fields_set:
            value = getattr(data, name)
            if value is not None:
                setattr(sop, name, value)
        sop.updated_at = self._clock()
        self._save(sops)
        return sop

    def delete_sop(self, sop_id: str) -> None:
        """Remove a procedure.

        Raises:
            SopNotFoundError: No procedure has this id.
        """
        sops = self.list_sops()
        remaining = [sop for sop in sops if sop.id != sop_id]
        if len(remaining) == len(sops):
            raise SopNotFoundError(sop_id)
        self._save(remaining)
        logger.info("Procedure deleted", extra={"sop_id": sop_id})

    def available_categories(self) -> list[str]:
        return list(TASK_CATEGORIES)

    def categories_with_sops(self) -> list[str]:
        """Distinct categories that have a procedure, in first-seen order."""
        return list(dict.fromkeys(sop.category for sop in self.list_sops()))

    def categories_without_sops(self) -> list[str]:
        covered = set(self.categories_with_sops())
        return [category for category in TASK_CATEGORIES if category not in covered]
