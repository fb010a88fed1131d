"""
Sale Submission Service.

Persists the line items of a finished wizard run to one sale:

1. Sale-wide provider allocation check (nothing is sent when it fails).
2. Provider reference check for every item (nothing is sent when it fails).
3. Template reconciliation: templates missing on the server are created.
4. Payload conversion for every item, before any service is created.
5. One POST per line item, in order.  The first failure stops the run.

The result always carries a ``SubmissionReport`` listing what was created,
which item failed and which were never attempted.  Created services are
not rolled back.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from travel_desk.errors import (
    ApiError,
    MissingProviderReference,
    PersistenceFailure,
    ProviderCapExceeded,
    TemplateReconciliationFailure,
)
from travel_desk.logger import StructuredLogger
from travel_desk.models.line_item import ServiceLineItem
from travel_desk.models.service_models import (
    CreatedService,
    FailedItem,
    PersistencePayload,
    ServiceResult,
    SubmissionReport,
)
from travel_desk.models.template import ServiceTemplate
from travel_desk.repositories.sale_service_repository import SaleServiceRepository
from travel_desk.repositories.template_repository import TemplateRepository
from travel_desk.services.base_service import BaseService
from travel_desk.services.line_item_aggregation import (
    check_provider_references,
    resolve_template,
    to_persistence_payload,
)
from travel_desk.services.provider_allocation import check_sale_allocation
from travel_desk.utils.audit import log_audit_event


class SaleSubmissionService(BaseService):
    """Creates the wizard's services on a sale."""

    def __init__(
        self,
        template_repo: TemplateRepository,
        sale_service_repo: SaleServiceRepository,
        logger: StructuredLogger,
        default_category: str = "",
    ) -> None:
        super().__init__(logger)
        self._templates = template_repo
        self._sale_services = sale_service_repo
        self._default_category = default_category

    # ------------------------------------------------------------------
    # Template reconciliation
    # ------------------------------------------------------------------

    def reconcile_templates(
        self, sale_id: str, line_items: Sequence[ServiceLineItem]
    ) -> tuple[list[ServiceTemplate], list[str]]:
        """Fetch the server's templates and create every missing one.

        Items naming the same missing template share one creation.

        Returns:
            ``(known_templates, created_template_names)``.

        Raises:
            TemplateReconciliationFailure: Listing or creating a template failed.
        """
        try:
            known = list(self._templates.list_for_wizard())
        except ApiError as exc:
            raise TemplateReconciliationFailure("(template list)", exc.message) from exc

        created: list[str] = []
        for item in line_items:
            resolution = resolve_template(item, known)
            if not resolution.needs_creation:
                continue
            if not resolution.name:
                raise TemplateReconciliationFailure(item.display_name, "Service template name is required")
            try:
                template = self._templates.create(
                    resolution.name,
                    description=resolution.description,
                    category=resolution.category or self._default_category,
                )
            except ApiError as exc:
                raise TemplateReconciliationFailure(resolution.name, exc.message) from exc
            known.append(template)
            created.append(template.name)
            self._logger.info("Created service template '%s' (%s)", template.name, template.id)
            log_audit_event(
                self._logger,
                action="CREATE",
                entity_type="ServiceTemplate",
                entity_id=template.id,
                sale_id=sale_id,
                details={"name": template.name, "category": template.category},
            )
        return known, created

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(
        self, sale_id: str, line_items: Sequence[ServiceLineItem]
    ) -> ServiceResult[SubmissionReport]:
        """Persist *line_items* to *sale_id*, one at a time.

        On failure ``error`` is the user-facing message (the backend's own
        message when the failure came from the server) and ``data`` is the
        partial report.
        """
        items = list(line_items)
        all_ids = [item.id for item in items]

        if not items:
            return ServiceResult(
                success=False,
                data=SubmissionReport(sale_id=sale_id),
                error="No services to submit",
                status_code=400,
            )

        try:
            check_sale_allocation(items)
        except ProviderCapExceeded as exc:
            self._logger.warning("Submission for sale %s blocked: %s", sale_id, exc)
            return ServiceResult(
                success=False,
                data=SubmissionReport(sale_id=sale_id, not_attempted=all_ids),
                error=str(exc),
                status_code=409,
            )

        for item in items:
            try:
                check_provider_references(item)
            except MissingProviderReference as exc:
                return self._failure(
                    sale_id,
                    [],
                    FailedItem(line_item_id=item.id, error=str(exc), status_code=422),
                    [other for other in all_ids if other != item.id],
                    [],
                )

        try:
            known, created_templates = self.reconcile_templates(sale_id, items)
        except TemplateReconciliationFailure as exc:
            self._logger.error("Template reconciliation failed for sale %s: %s", sale_id, exc)
            return ServiceResult(
                success=False,
                data=SubmissionReport(sale_id=sale_id, not_attempted=all_ids),
                error=exc.message,
                status_code=502,
            )

        payloads: list[PersistencePayload] = []
        for item in items:
            result = to_persistence_payload(item, known)
            if result.payload is None:
                return self._failure(
                    sale_id,
                    [],
                    FailedItem(
                        line_item_id=item.id,
                        error=f"Service template '{result.resolution.name}' is not available",
                        status_code=422,
                    ),
                    [other for other in all_ids if other != item.id],
                    created_templates,
                )
            payloads.append(result.payload)

        succeeded: list[CreatedService] = []
        for index, (item, payload) in enumerate(zip(items, payloads)):
            try:
                record = self._persist(sale_id, item, payload)
            except PersistenceFailure as exc:
                return self._failure(
                    sale_id,
                    succeeded,
                    FailedItem(line_item_id=exc.line_item_id, error=exc.message, status_code=exc.status_code),
                    all_ids[index + 1:],
                    created_templates,
                )
            service_id = self._record_id(record)
            succeeded.append(
                CreatedService(line_item_id=item.id, service_id=service_id, service_name=payload.service_name)
            )
            log_audit_event(
                self._logger,
                action="CREATE",
                entity_type="SaleService",
                entity_id=service_id or item.id,
                sale_id=sale_id,
                details={
                    "line_item_id": item.id,
                    "service_name": payload.service_name,
                    "provider_count": len(payload.providers),
                    "cost": str(payload.cost),
                    "currency": payload.currency.value,
                },
            )

        self._logger.info("Submitted %d service(s) to sale %s", len(succeeded), sale_id)
        return ServiceResult(
            success=True,
            data=SubmissionReport(
                sale_id=sale_id, succeeded=succeeded, created_templates=created_templates
            ),
            status_code=201,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(
        self, sale_id: str, item: ServiceLineItem, payload: PersistencePayload
    ) -> Optional[dict[str, object]]:
        try:
            return self._sale_services.add_from_template(sale_id, payload.to_api())
        except ApiError as exc:
            raise PersistenceFailure(item.id, exc.message, exc.status_code) from exc

    @staticmethod
    def _record_id(record: Optional[dict[str, object]]) -> Optional[str]:
        if not record:
            return None
        value = record.get("_id", record.get("id"))
        return str(value) if value is not None else None

    def _failure(
        self,
        sale_id: str,
        succeeded: list[CreatedService],
        failed: FailedItem,
        not_attempted: list[str],
        created_templates: list[str],
    ) -> ServiceResult[SubmissionReport]:
        self._logger.error(
            "Submission to sale %s stopped at service %s: %s (%d created, %d not attempted)",
            sale_id,
            failed.line_item_id,
            failed.error,
            len(succeeded),
            len(not_attempted),
            extra={"sale_id": sale_id, "line_item_id": failed.line_item_id},
        )
        return ServiceResult(
            success=False,
            data=SubmissionReport(
                sale_id=sale_id,
                succeeded=list(succeeded),
                failed=failed,
                not_attempted=not_attempted,
                created_templates=created_templates,
            ),
            error=failed.error,
            status_code=failed.status_code or 500,
        )
