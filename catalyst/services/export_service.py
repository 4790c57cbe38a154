"""
Workshop report export: Excel workbook and printable HTML.

Both renderers are pure functions over ``Workshop.to_snapshot()``. The only
time-dependent value is ``generated_at``; the same snapshot and timestamp
produce identical HTML and byte-identical workbook files.
"""

import io
import logging
import re
import zipfile
from datetime import datetime, timezone
from html import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from catalyst.models.workshop import (
    MATURITY_LEVELS,
    QUADRANT_LABELS,
    QUADRANT_THRESHOLD,
    quadrant_for,
)

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
TOTAL_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
QUADRANT_FILLS = {
    "quick_win": PatternFill(start_color="36BF78", end_color="36BF78", fill_type="solid"),
    "strategic": PatternFill(start_color="02A2FD", end_color="02A2FD", fill_type="solid"),
    "fill_in": PatternFill(start_color="F39C12", end_color="F39C12", fill_type="solid"),
    "deprioritize": PatternFill(start_color="95A5A6", end_color="95A5A6", fill_type="solid"),
}

DISCOUNT_BANDS = {
    1: "60-70%",
    2: "40-50%",
    3: "20-30%",
    4: "5-15%",
    5: "0-5%",
}
IMPACT_WEIGHTS = (
    ("Total annual value", "30%"),
    ("Strategic alignment", "20%"),
    ("Scope of improvement", "20%"),
    ("Benefit mix", "15%"),
    ("Three-year NPV", "15%"),
)
FEASIBILITY_WEIGHTS = (
    ("Survey dimension fit", "40%"),
    ("Data readiness", "20%"),
    ("Implementation complexity", "20%"),
    ("Change management", "10%"),
    ("Infrastructure alignment", "10%"),
)
TOP_PRIORITY_LIMIT = 10


# ── Formatting helpers ───────────────────────────────────────────────────────

def _now(generated_at):
    return generated_at or datetime.now(timezone.utc)


def _stamp(generated_at) -> str:
    return _now(generated_at).strftime("%Y-%m-%d %H:%M UTC")


def _num(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _thousands(value) -> str:
    value = _num(value)
    return f"${value / 1000:,.0f}K" if value else "N/A"


def _millions(value) -> str:
    value = _num(value)
    return f"${value / 1_000_000:,.1f}M" if value else "N/A"


def _pct(value) -> str:
    value = _num(value)
    return f"{value:g}%" if value is not None else "—"


def format_quadrant(quadrant) -> str:
    return QUADRANT_LABELS.get(quadrant, "—")


def report_filename(company, ext: str) -> str:
    """``Acme Corp`` → ``Acme_Corp_Workshop_Report.xlsx``."""
    base = re.sub(r"[^A-Za-z0-9]+", "_", company or "").strip("_") or "Workshop"
    return f"{base}_Workshop_Report.{ext.lstrip('.')}"


# ── Snapshot readers ─────────────────────────────────────────────────────────

def _synthesis(snapshot) -> dict:
    return snapshot.get("workshopSynthesis") or {}


def _validation(snapshot) -> dict:
    return snapshot.get("validationResults") or {}


def _priority_rows(snapshot) -> list[dict]:
    """Priority rows, preferring persisted (possibly overridden) scores over the stored matrix."""
    rows = snapshot.get("priorities") or []
    if not rows:
        rows = (snapshot.get("prioritizationMatrix") or {}).get("priorities") or []
    result = []
    for row in rows:
        impact = _num(row.get("impactScore"))
        feasibility = _num(row.get("feasibilityScore"))
        if impact is None or feasibility is None:
            continue
        result.append({
            "useCaseId": str(row.get("useCaseId", "")),
            "useCaseTitle": row.get("useCaseTitle") or "",
            "impactScore": impact,
            "feasibilityScore": feasibility,
            "quadrant": quadrant_for(impact, feasibility),
            "overrideReason": row.get("overrideReason"),
        })
    return result


def _validation_rows(snapshot) -> list[dict]:
    return _validation(snapshot).get("validations") or []


def _use_case_rows(snapshot) -> list[dict]:
    """Reconciled use cases joined with their priority and validation rows."""
    priorities = {p["useCaseId"]: p for p in _priority_rows(snapshot)}
    validations = {str(v.get("useCaseId")): v for v in _validation_rows(snapshot)}
    rows = []
    for uc in snapshot.get("reconciledUseCases") or []:
        uc_id = str(uc.get("id", ""))
        priority = priorities.get(uc_id, {})
        validation = validations.get(uc_id, {})
        rows.append({
            "id": uc_id,
            "title": uc.get("title") or "",
            "businessFunction": uc.get("businessFunction") or "",
            "totalAnnualValue": uc.get("totalAnnualValue"),
            "impactScore": priority.get("impactScore"),
            "feasibilityScore": priority.get("feasibilityScore"),
            "quadrant": priority.get("quadrant"),
            "horizon": uc.get("horizon") or "",
            "agenticPattern": uc.get("agenticPattern") or "",
            "confidenceLevel": validation.get("confidenceLevel"),
        })
    return rows


def _validation_totals(snapshot) -> tuple:
    validation = _validation(snapshot)
    rows = _validation_rows(snapshot)
    original = validation.get("totalOriginalValue")
    validated = validation.get("totalValidatedValue")
    confidence = validation.get("averageConfidence")
    if original is None:
        original = sum(_num(v.get("originalBenefit")) or 0 for v in rows)
    if validated is None:
        validated = sum(_num(v.get("validatedBenefit")) or 0 for v in rows)
    if confidence is None and rows:
        levels = [_num(v.get("confidenceLevel")) or 0 for v in rows]
        confidence = round(sum(levels) / len(levels), 1)
    return original, validated, confidence


def top_priorities(snapshot, limit: int = TOP_PRIORITY_LIMIT) -> list[dict]:
    """Quick wins then strategic bets, each ranked by impact × feasibility."""
    order = {"quick_win": 0, "strategic": 1}
    ranked = [p for p in _priority_rows(snapshot) if p["quadrant"] in order]
    ranked.sort(key=lambda p: (
        order[p["quadrant"]],
        -(p["impactScore"] * p["feasibilityScore"]),
        p["useCaseId"],
    ))
    return ranked[:limit]


def _roadmap_items(synthesis) -> list[tuple[str, str]]:
    roadmap = synthesis.get("implementationRoadmap") or {}
    items = []
    for phase, key in (("30 Days", "thirtyDay"), ("60 Days", "sixtyDay"), ("90 Days", "ninetyDay")):
        for item in roadmap.get(key) or []:
            items.append((phase, item))
    return items


# ── Excel ────────────────────────────────────────────────────────────────────

def _apply_header_style(ws, row: int, col_count: int) -> None:
    """Apply dark-header styling to an Excel row (1-indexed)."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Auto-size column widths based on content (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def _table_sheet(wb, title: str, headers: list[str], rows: list[list]):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _apply_header_style(ws, 1, len(headers))
    for row in rows:
        ws.append(row)
    ws.freeze_panes = "A2"
    return ws


def _summary_sheet(ws, snapshot, generated_at) -> None:
    synthesis = _synthesis(snapshot)
    use_cases = snapshot.get("reconciledUseCases") or []
    priorities = _priority_rows(snapshot)
    _, validated, confidence = _validation_totals(snapshot)
    total_value = validated or synthesis.get("totalEstimatedValue") or 0

    ws.title = "Executive Summary"
    ws.merge_cells("A1:B1")
    ws["A1"] = f"AI Catalyst Workshop Report — {snapshot.get('companyName', '')}"
    ws["A1"].font = Font(size=16, bold=True)
    ws["A2"] = f"Generated: {_stamp(generated_at)}"
    ws["A2"].font = Font(size=10, italic=True, color="666666")

    ws.append([])
    ws.append(["Field", "Value"])
    _apply_header_style(ws, ws.max_row, 2)
    for field, value in (
        ("Company", snapshot.get("companyName") or ""),
        ("Industry", snapshot.get("industry") or ""),
        ("Facilitator", snapshot.get("facilitatorName") or ""),
        ("Workshop Date", snapshot.get("workshopDate") or "N/A"),
        ("Status", snapshot.get("status") or ""),
        ("Total Use Cases", len(use_cases)),
        ("Quick Wins", sum(1 for p in priorities if p["quadrant"] == "quick_win")),
        ("Strategic Bets", sum(1 for p in priorities if p["quadrant"] == "strategic")),
        ("Est. Annual Value", _millions(total_value)),
        ("Avg Confidence", _pct(confidence) if confidence is not None else "N/A"),
    ):
        ws.append([field, value])

    ws.append([])
    ws.append(["Executive Summary", synthesis.get("executiveSummary") or "Not generated yet"])
    ws.cell(row=ws.max_row, column=2).alignment = Alignment(wrap_text=True, vertical="top")

    recommendations = synthesis.get("topRecommendations") or []
    if recommendations:
        ws.append([])
        ws.append(["Top Recommendations", ""])
        ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
        for i, rec in enumerate(recommendations, 1):
            ws.append([f"{i}.", rec])

    ws.column_dimensions["A"].width = 30
    ws.column_dimensions["B"].width = 80


def _formula_guide_sheet(wb) -> None:
    ws = wb.create_sheet("Formula Guide")
    ws.append(["Topic", "Rule"])
    _apply_header_style(ws, 1, 2)
    t = QUADRANT_THRESHOLD
    ws.append(["Quadrant: Quick Win", f"impact >= {t} and feasibility >= {t}"])
    ws.append(["Quadrant: Strategic Bet", f"impact >= {t} and feasibility < {t}"])
    ws.append(["Quadrant: Fill-In", f"impact < {t} and feasibility >= {t}"])
    ws.append(["Quadrant: Deprioritize", f"impact < {t} and feasibility < {t}"])
    ws.append([])
    ws.append(["Readiness level", "Benefit discount band"])
    _apply_header_style(ws, ws.max_row, 2)
    for level, band in DISCOUNT_BANDS.items():
        ws.append([f"{level} {MATURITY_LEVELS[level]}", band])
    ws.append([])
    ws.append(["Impact factor (0-10)", "Weight"])
    _apply_header_style(ws, ws.max_row, 2)
    for factor, weight in IMPACT_WEIGHTS:
        ws.append([factor, weight])
    ws.append([])
    ws.append(["Feasibility factor (0-10)", "Weight"])
    _apply_header_style(ws, ws.max_row, 2)
    for factor, weight in FEASIBILITY_WEIGHTS:
        ws.append([factor, weight])
    _auto_width(ws)


def build_workshop_workbook(snapshot: dict, generated_at: datetime | None = None) -> Workbook:
    wb = Workbook()
    _summary_sheet(wb.active, snapshot, generated_at)

    ws = _table_sheet(
        wb, "Use Cases",
        ["ID", "Title", "Function", "Annual Value", "Impact", "Feasibility",
         "Quadrant", "Horizon", "Pattern", "Confidence"],
        [
            [uc["id"], uc["title"], uc["businessFunction"], _thousands(uc["totalAnnualValue"]),
             uc["impactScore"] if uc["impactScore"] is not None else "—",
             uc["feasibilityScore"] if uc["feasibilityScore"] is not None else "—",
             format_quadrant(uc["quadrant"]), uc["horizon"] or "—", uc["agenticPattern"] or "—",
             _pct(uc["confidenceLevel"])]
            for uc in _use_case_rows(snapshot)
        ],
    )
    _auto_width(ws)

    validations = _validation_rows(snapshot)
    if validations:
        titles = {str(uc.get("id")): uc.get("title") for uc in snapshot.get("reconciledUseCases") or []}
        ws = _table_sheet(
            wb, "Benefit Validation",
            ["Use Case", "Original Value", "Validated Value", "Confidence", "Adjustment", "Risk Flags"],
            [
                [titles.get(str(v.get("useCaseId"))) or str(v.get("useCaseId", "")),
                 _thousands(v.get("originalBenefit")), _thousands(v.get("validatedBenefit")),
                 _pct(v.get("confidenceLevel")), v.get("adjustmentReason") or "",
                 "; ".join(v.get("riskFlags") or [])]
                for v in validations
            ],
        )
        original, validated, confidence = _validation_totals(snapshot)
        ws.append([])
        ws.append(["TOTAL", _millions(original), _millions(validated), _pct(confidence), "", ""])
        for col in range(1, 5):
            ws.cell(row=ws.max_row, column=col).font = TOTAL_FONT
        _auto_width(ws)

    priorities = _priority_rows(snapshot)
    if priorities:
        ws = _table_sheet(
            wb, "Prioritization Matrix",
            ["Use Case ID", "Title", "Impact", "Feasibility", "Quadrant", "Override Reason"],
            [
                [p["useCaseId"], p["useCaseTitle"], p["impactScore"], p["feasibilityScore"],
                 format_quadrant(p["quadrant"]), p["overrideReason"] or ""]
                for p in priorities
            ],
        )
        for row_idx, p in enumerate(priorities, 2):
            cell = ws.cell(row=row_idx, column=5)
            cell.fill = QUADRANT_FILLS[p["quadrant"]]
            cell.font = HEADER_FONT
        _auto_width(ws)

        top = top_priorities(snapshot)
        if top:
            ws = _table_sheet(
                wb, "Top Priorities",
                ["Rank", "Use Case ID", "Title", "Quadrant", "Impact", "Feasibility", "Priority Score"],
                [
                    [rank, p["useCaseId"], p["useCaseTitle"], format_quadrant(p["quadrant"]),
                     p["impactScore"], p["feasibilityScore"],
                     round(p["impactScore"] * p["feasibilityScore"], 2)]
                    for rank, p in enumerate(top, 1)
                ],
            )
            _auto_width(ws)

    synthesis = _synthesis(snapshot)
    roadmap = _roadmap_items(synthesis)
    if roadmap:
        ws = _table_sheet(wb, "Implementation Roadmap", ["Phase", "Action Item"],
                          [[phase, item] for phase, item in roadmap])
        _auto_width(ws)

    risks = synthesis.get("riskRegister") or []
    if risks:
        ws = _table_sheet(
            wb, "Risk Register", ["Risk", "Likelihood", "Impact", "Mitigation"],
            [
                [r.get("risk") or "", (r.get("likelihood") or "").upper(),
                 (r.get("impact") or "").upper(), r.get("mitigation") or ""]
                for r in risks
            ],
        )
        _auto_width(ws)

    lineages = snapshot.get("dataLineage") or []
    if lineages:
        ws = _table_sheet(
            wb, "Data Lineage", ["Use Case", "Data Sources", "Inputs", "Outputs", "Governance"],
            [
                [str(l.get("useCaseId", "")), ", ".join(l.get("dataSources") or []),
                 ", ".join(l.get("inputs") or []), ", ".join(l.get("outputs") or []),
                 l.get("governance") or ""]
                for l in lineages
            ],
        )
        _auto_width(ws)

    _formula_guide_sheet(wb)
    return wb


def export_workshop_xlsx(snapshot: dict, generated_at: datetime | None = None) -> bytes:
    """Render the workshop snapshot as an .xlsx file."""
    wb = build_workshop_workbook(snapshot, generated_at)
    wb.properties.creator = "AI Catalyst Workshop"
    wb.properties.created = _now(generated_at).replace(tzinfo=None)
    wb.properties.modified = wb.properties.created
    buf = io.BytesIO()
    wb.save(buf)
    logger.info("Workshop %s exported to xlsx (%d sheets)", snapshot.get("id"), len(wb.sheetnames))
    return _pin_archive_times(buf.getvalue(), wb.properties.created)


_CORE_MODIFIED = re.compile(r"(<dcterms:modified[^>]*>)[^<]*(</dcterms:modified>)")


def _pin_archive_times(data: bytes, when: datetime) -> bytes:
    """Rewrite the .xlsx archive so no entry carries the wall-clock save time.

    ``wb.save`` stamps zip headers and ``dcterms:modified`` with the current
    time; both are replaced by ``when``.
    """
    stamp = when.strftime("%Y-%m-%dT%H:%M:%SZ")
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(out, "w") as dst:
        for item in src.infolist():
            payload = src.read(item.filename)
            if item.filename == "docProps/core.xml":
                text = _CORE_MODIFIED.sub(lambda m: m.group(1) + stamp + m.group(2),
                                          payload.decode("utf-8"))
                payload = text.encode("utf-8")
            info = zipfile.ZipInfo(item.filename, date_time=when.timetuple()[:6])
            info.compress_type = item.compress_type
            dst.writestr(info, payload)
    return out.getvalue()


# ── HTML ─────────────────────────────────────────────────────────────────────

_RISK_CLASSES = {"high", "medium", "low"}


def export_workshop_html(snapshot: dict, generated_at: datetime | None = None) -> str:
    """
    Printable HTML report with inline CSS, for browser print-to-PDF.
    All workshop text is HTML-escaped.
    """
    company = escape(snapshot.get("companyName") or "")
    synthesis = _synthesis(snapshot)
    use_cases = _use_case_rows(snapshot)
    priorities = _priority_rows(snapshot)
    _, validated, confidence = _validation_totals(snapshot)
    total_value = validated or synthesis.get("totalEstimatedValue") or 0
    quick_wins = sum(1 for p in priorities if p["quadrant"] == "quick_win")

    summary_html = ""
    if synthesis.get("executiveSummary"):
        summary_html = f"""
<h2>Executive Summary</h2>
<p>{escape(synthesis['executiveSummary'])}</p>"""

    recs_html = ""
    recommendations = synthesis.get("topRecommendations") or []
    if recommendations:
        items = "".join(
            f'\n<div class="rec-item"><div class="rec-num">{i}</div><span>{escape(rec)}</span></div>'
            for i, rec in enumerate(recommendations, 1)
        )
        recs_html = f"\n<h2>Top Recommendations</h2>{items}"

    uc_rows_html = ""
    for uc in use_cases:
        uc_rows_html += f"""
        <tr>
            <td>{escape(uc['id'])}</td>
            <td>{escape(uc['title'])}</td>
            <td>{escape(uc['businessFunction'])}</td>
            <td>{_thousands(uc['totalAnnualValue'])}</td>
            <td>{format_quadrant(uc['quadrant'])}</td>
            <td>{escape(uc['horizon'] or '—')}</td>
        </tr>"""

    top_html = ""
    top = top_priorities(snapshot)
    if top:
        rows = "".join(
            f"""
        <tr>
            <td>{rank}</td>
            <td>{escape(p['useCaseTitle'] or p['useCaseId'])}</td>
            <td>{format_quadrant(p['quadrant'])}</td>
            <td>{p['impactScore']:g}</td>
            <td>{p['feasibilityScore']:g}</td>
        </tr>"""
            for rank, p in enumerate(top, 1)
        )
        top_html = f"""
<h2>Top Priorities</h2>
<table><thead><tr><th>#</th><th>Use Case</th><th>Quadrant</th><th>Impact</th><th>Feasibility</th></tr></thead>
<tbody>{rows}</tbody></table>"""

    roadmap_html = ""
    roadmap = _roadmap_items(synthesis)
    if roadmap:
        rows = "".join(
            f'\n        <tr><td><span class="phase phase-{phase.split()[0]}">{phase}</span></td>'
            f"<td>{escape(item)}</td></tr>"
            for phase, item in roadmap
        )
        roadmap_html = f"""
<h2>Implementation Roadmap</h2>
<table><thead><tr><th>Phase</th><th>Action</th></tr></thead>
<tbody>{rows}</tbody></table>"""

    risks_html = ""
    risks = synthesis.get("riskRegister") or []
    if risks:
        rows = ""
        for r in risks:
            likelihood = (r.get("likelihood") or "").lower()
            impact = (r.get("impact") or "").lower()
            l_cls = f"risk-{likelihood}" if likelihood in _RISK_CLASSES else ""
            i_cls = f"risk-{impact}" if impact in _RISK_CLASSES else ""
            rows += f"""
        <tr>
            <td>{escape(r.get('risk') or '')}</td>
            <td class="{l_cls}">{escape(likelihood.upper())}</td>
            <td class="{i_cls}">{escape(impact.upper())}</td>
            <td>{escape(r.get('mitigation') or '')}</td>
        </tr>"""
        risks_html = f"""
<h2>Risk Register</h2>
<table><thead><tr><th>Risk</th><th>Likelihood</th><th>Impact</th><th>Mitigation</th></tr></thead>
<tbody>{rows}</tbody></table>"""

    resources_html = ""
    resources = synthesis.get("resourceRequirements") or []
    if resources:
        items = "".join(f"<li>{escape(r)}</li>" for r in resources)
        resources_html = f"""
<h2>Resource Requirements</h2>
<ul>{items}</ul>"""

    html = f"""<!DOCTYPE html>
<html lang="en"><head>
<meta charset="utf-8">
<title>{company} — AI Catalyst Workshop Report</title>
<style>
    body {{ font-family: 'Segoe UI', Arial, sans-serif; margin: 40px auto; max-width: 900px; color: #1e293b; line-height: 1.6; }}
    h1 {{ color: #354A5F; margin-bottom: 4px; }}
    h2 {{ color: #354A5F; margin: 32px 0 12px; border-bottom: 2px solid #e2e8f0; padding-bottom: 6px; }}
    p, li {{ font-size: 14px; }}
    .meta {{ color: #666; font-size: 13px; margin-bottom: 24px; }}
    .cards {{ display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; margin-bottom: 24px; }}
    .card {{ border: 1px solid #e2e8f0; border-radius: 8px; padding: 12px; }}
    .card-label {{ font-size: 11px; color: #94a3b8; text-transform: uppercase; }}
    .card-value {{ font-size: 24px; font-weight: 700; color: #354A5F; }}
    .rec-item {{ display: flex; gap: 8px; margin: 6px 0; font-size: 14px; }}
    .rec-num {{ width: 22px; height: 22px; border-radius: 50%; background: #354A5F; color: #fff;
                text-align: center; font-size: 11px; font-weight: 700; flex-shrink: 0; }}
    table {{ border-collapse: collapse; width: 100%; margin: 12px 0 24px; font-size: 13px; }}
    th {{ background: #354A5F; color: #fff; padding: 8px 10px; text-align: left; font-size: 11px; text-transform: uppercase; }}
    td {{ padding: 8px 10px; border-bottom: 1px solid #e2e8f0; }}
    tr:nth-child(even) {{ background: #f8fafc; }}
    .phase {{ display: inline-block; padding: 2px 8px; border-radius: 4px; font-size: 11px; font-weight: 600; }}
    .phase-30 {{ background: #dcfce7; color: #166534; }}
    .phase-60 {{ background: #dbeafe; color: #1e40af; }}
    .phase-90 {{ background: #e0e7ff; color: #3730a3; }}
    .risk-high {{ color: #dc2626; font-weight: 600; }}
    .risk-medium {{ color: #d97706; }}
    .risk-low {{ color: #2563eb; }}
    .footer {{ margin-top: 40px; padding-top: 16px; border-top: 1px solid #e2e8f0; font-size: 11px; color: #94a3b8; text-align: center; }}
    @media print {{ body {{ margin: 20px; }} }}
</style>
</head><body>
<h1>{company}</h1>
<p class="meta">AI Use Case Workshop Report — {escape(snapshot.get('industry') or '')} — Generated {_stamp(generated_at)}</p>

<div class="cards">
    <div class="card"><div class="card-label">Use Cases</div><div class="card-value">{len(use_cases)}</div></div>
    <div class="card"><div class="card-label">Quick Wins</div><div class="card-value">{quick_wins}</div></div>
    <div class="card"><div class="card-label">Est. Annual Value</div><div class="card-value">{_millions(total_value)}</div></div>
    <div class="card"><div class="card-label">Avg Confidence</div><div class="card-value">{_pct(confidence) if confidence is not None else "N/A"}</div></div>
</div>
{summary_html}{recs_html}

<h2>Use Case Portfolio</h2>
<table><thead><tr><th>ID</th><th>Title</th><th>Function</th><th>Annual Value</th><th>Quadrant</th><th>Horizon</th></tr></thead>
<tbody>{uc_rows_html}</tbody></table>
{top_html}{roadmap_html}{risks_html}{resources_html}

<div class="footer">AI Catalyst Workshop — {company} Workshop Report — {_now(generated_at).strftime('%Y-%m-%d')}</div>
</body></html>"""

    return html
