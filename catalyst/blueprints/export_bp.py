"""
Workshop report export endpoints.

    GET|POST /api/v1/workshops/<id>/export/pdf    printable HTML report, inline
    GET|POST /api/v1/workshops/<id>/export/xlsx   Excel workbook, attachment
    POST     /api/v1/workshops/<id>/share         URL of the printable report

The "pdf" route returns HTML meant for the browser's print-to-PDF; no
server-side PDF renderer is involved. Content is built in memory.
"""

import logging

from flask import Blueprint, Response, jsonify, url_for

from catalyst.services import workshop_service as svc
from catalyst.services.export_service import (
    export_workshop_html,
    export_workshop_xlsx,
    report_filename,
)
from catalyst.utils.errors import register_error_handlers

logger = logging.getLogger(__name__)

export_bp = Blueprint("export", __name__, url_prefix="/api/v1")
register_error_handlers(export_bp)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@export_bp.route("/workshops/<workshop_id>/export/pdf", methods=["GET", "POST"])
def export_pdf(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    html = export_workshop_html(workshop.to_snapshot())
    filename = report_filename(workshop.company_name, "html")
    logger.info("HTML report exported", extra={"workshop_id": workshop_id})
    return Response(
        html,
        mimetype="text/html",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@export_bp.route("/workshops/<workshop_id>/export/xlsx", methods=["GET", "POST"])
def export_xlsx(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    content = export_workshop_xlsx(workshop.to_snapshot())
    filename = report_filename(workshop.company_name, "xlsx")
    return Response(
        content,
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@export_bp.route("/workshops/<workshop_id>/share", methods=["POST"])
def share_report(workshop_id):
    workshop = svc.get_workshop_or_404(workshop_id)
    return jsonify({
        "success": True,
        "shareUrl": url_for("export.export_pdf", workshop_id=workshop.id),
        "shareId": workshop.id[:8],
        "message": "Share the report URL to give others access to the HTML report.",
    }), 200
