from __future__ import annotations

from typing import Literal

from ditup_api.api.validators.rules import Strict, Tagname


class NewTagAttributes(Strict):
    tagname: Tagname


class NewTagData(Strict):
    type: Literal["tags"]
    attributes: NewTagAttributes


class NewTagDocument(Strict):
    data: NewTagData
