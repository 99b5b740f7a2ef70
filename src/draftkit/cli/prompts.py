"""Interactive Typer resolver for import decisions"""

from typing import Any

import typer

from draftkit.core.decisions import DecisionRequest, FieldMappingRequest, TextReviewRequest


class PromptResolver:
    """Answer decision requests on the terminal.

    With ``assume_yes`` PDF text is accepted unchanged and field mapping
    requests are cancelled, since no key can be chosen unattended.
    """

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes

    async def __call__(self, request: DecisionRequest) -> Any:
        if isinstance(request, FieldMappingRequest):
            return None if self.assume_yes else self._map_fields(request)
        if isinstance(request, TextReviewRequest):
            return request.text if self.assume_yes else self._review_text(request)
        return None

    def _map_fields(self, request: FieldMappingRequest) -> dict[str, str] | None:
        typer.echo(f"{request.file_name}: cannot find {', '.join(request.missing)}")
        typer.echo(f"  Available keys: {', '.join(request.keys)}")
        mapping = dict(request.suggested)
        for name in request.missing:
            key = typer.prompt(f"  Key for {name} (blank to cancel)", default="", show_default=False)
            if not key.strip():
                return None
            mapping[name] = key.strip()
        return mapping

    def _review_text(self, request: TextReviewRequest) -> str | None:
        typer.echo(f"{request.file_name}: extracted {len(request.text)} chars from {request.page_count} page(s)")
        if typer.confirm("  Edit the text before import?", default=False):
            edited = typer.edit(request.text)
            return request.text if edited is None else edited
        if typer.confirm("  Import the text as extracted?", default=True):
            return request.text
        return None
