from __future__ import annotations

"""
Local Link Validator.

Loads every document and reports relative or absolute links whose target
is neither a document, a media file nor a directory of the repository.
"""

from typing import TYPE_CHECKING, List, Union

from docrepo.core.collaborators import Validator, load_documents
from docrepo.domain.models import DocLocation, ValidationError, ValidationLevel

if TYPE_CHECKING:
    from docrepo.core.repo import DocRepo


class LocalLinkValidator(Validator):
    name = "local-links"
    requires_load = True

    def __init__(self, level: Union[str, ValidationLevel] = ValidationLevel.ERROR) -> None:
        self.level = ValidationLevel(level)

    async def validate(self, repo: "DocRepo") -> List[ValidationError]:
        docs = repo.docs()
        await load_documents(docs)

        known = {n.rel_path for n in repo.walk_bfs()}
        errors: List[ValidationError] = []
        for doc in docs:
            for link in doc.local_links():
                if link.path in known:
                    continue
                errors.append(ValidationError(
                    name=self.name,
                    level=self.level,
                    message=f"Broken link to '{link.raw}'",
                    details=f"Resolved target '{link.path}' does not exist in repository '{repo.name}'.",
                    location=DocLocation(rel_path=doc.rel_path, line=link.line),
                ))
        return errors
