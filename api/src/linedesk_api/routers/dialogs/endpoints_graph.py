from typing import Any, Dict

from fastapi import Depends, HTTPException, Response, status
from sqlmodel import Session

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import get_dialog_or_404, load_section_states
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.schemas import GraphRequest
from linedesk_api.utils.dialog_graph import DialogGraph, extract_graph
from linedesk_api.utils.graph_layout import LayoutUnavailableError, compute_layout, render_svg


def _stored_graph(session: Session, dialog_id: str) -> DialogGraph:
    dialog = get_dialog_or_404(session, dialog_id)
    return extract_graph(load_section_states(session, dialog.id), dialog.start_section)


def _layout_unavailable(exc: LayoutUnavailableError) -> HTTPException:
    logger.error("Graph layout unavailable", extra={"reason": str(exc)})
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Graph layout is unavailable")


@router.post("/graph")
def preview_graph(body: GraphRequest) -> Dict[str, Any]:
    """Graph of unsaved editor state; nothing is read from the database."""
    graph = extract_graph(body.sections, body.start_section)
    logger.info("Preview graph built", extra={"nodes": len(graph.nodes), "links": len(graph.links)})
    return graph.to_dict()


@router.get("/{dialog_id}/graph")
def get_graph(dialog_id: str, session: Session = Depends(get_session)) -> Dict[str, Any]:  # noqa: B008
    graph = _stored_graph(session, dialog_id)
    logger.info("Graph built", extra={"dialog_id": dialog_id, "nodes": len(graph.nodes), "links": len(graph.links)})
    return graph.to_dict()


@router.get("/{dialog_id}/graph/layout")
def get_graph_layout(dialog_id: str, session: Session = Depends(get_session)) -> Dict[str, Any]:  # noqa: B008
    graph = _stored_graph(session, dialog_id)
    try:
        layout = compute_layout(graph)
    except LayoutUnavailableError as exc:
        raise _layout_unavailable(exc) from exc
    return {**graph.to_dict(), "layout": layout.to_dict()}


@router.get("/{dialog_id}/graph.svg")
def get_graph_svg(dialog_id: str, session: Session = Depends(get_session)) -> Response:  # noqa: B008
    graph = _stored_graph(session, dialog_id)
    try:
        svg = render_svg(graph)
    except LayoutUnavailableError as exc:
        raise _layout_unavailable(exc) from exc
    return Response(content=svg, media_type="image/svg+xml")
