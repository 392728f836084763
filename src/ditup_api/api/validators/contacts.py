"""
ditup_api.api.validators.contacts

Contact request and confirmation documents.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError

from ditup_api.api.errors import Issue, ValidationFailed, issues_from_validation_error
from ditup_api.api.serializers import contact_id
from ditup_api.api.validators.rules import ContactMessage, Reference, Strict, ToRelationship, Trust
from ditup_api.auth.models import Auth


class NewContactAttributes(Strict):
    trust: Trust
    reference: Reference
    message: ContactMessage


class NewContactData(Strict):
    type: Literal["contacts"]
    attributes: NewContactAttributes
    relationships: ToRelationship


class NewContactDocument(Strict):
    data: NewContactData


class ContactPatchAttributes(Strict):
    trust: Trust | None = None
    reference: Reference | None = None
    is_confirmed: bool | None = Field(default=None, alias="isConfirmed")


class ContactPatchData(Strict):
    type: Literal["contacts"]
    id: str
    attributes: ContactPatchAttributes


class ContactPatchDocument(Strict):
    data: ContactPatchData

    @property
    def is_confirmation(self) -> bool:
        return "is_confirmed" in self.data.attributes.model_fields_set


def _target_of(raw: Any) -> Any:
    node = raw
    for key in ("data", "relationships", "to", "data", "id"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def parse_new_contact(raw: Any, *, auth: Auth) -> NewContactDocument:
    """
    Validate a contact request document.

    Field errors and the rule that the target is not the caller are reported
    together.
    """
    issues: list[Issue] = []
    doc: NewContactDocument | None = None
    try:
        doc = NewContactDocument.model_validate(raw)
    except ValidationError as e:
        issues.extend(issues_from_validation_error(e))

    target = _target_of(raw)
    if isinstance(target, str) and auth.is_self(target):
        issues.append(
            Issue(
                msg="you cannot create a contact to yourself",
                param="to",
                value=target,
                pointer="/data/relationships/to/data/id",
            )
        )

    if issues or doc is None:
        raise ValidationFailed(issues)
    return doc


def check_contact_patch(doc: ContactPatchDocument, *, from_: str, to: str) -> None:
    issues: list[Issue] = []
    attrs = doc.data.attributes
    given = attrs.model_fields_set

    if doc.data.id != contact_id(from_, to):
        issues.append(
            Issue(
                msg="document id doesn't match the url parameters",
                param="id",
                value=doc.data.id,
                pointer="/data/id",
            )
        )

    if doc.is_confirmation:
        missing = sorted({"trust", "reference"} - given)
        if missing:
            issues.append(
                Issue(
                    msg="incomplete request",
                    value=f"missing attributes: {', '.join(missing)}",
                    pointer="/data/attributes",
                )
            )
        if attrs.is_confirmed is not True:
            issues.append(
                Issue(
                    msg="isConfirmed must be true (only confirming is possible, use DELETE to refuse the contact)",
                    param="isConfirmed",
                    value=attrs.is_confirmed,
                    pointer="/data/attributes/isConfirmed",
                )
            )
    elif not given:
        issues.append(
            Issue(msg="no attributes to update", param="attributes", pointer="/data/attributes")
        )

    # An explicit null would erase a trust level or a reference.
    for name in ("trust", "reference"):
        if name in given and getattr(attrs, name) is None:
            issues.append(
                Issue(msg=f"{name} can't be null", param=name, pointer=f"/data/attributes/{name}")
            )

    if issues:
        raise ValidationFailed(issues)
