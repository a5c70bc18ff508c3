"""
Document Service - PDF rendering for job-order invoices, quotations and final invoices
"""
from datetime import date
from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape
import re

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from logistik.services.formatting import format_date_id, format_number_id, format_rupiah, terbilang

# Letterhead printed on every document
COMPANY_INFO = {
    "name": "PT. Mulia Kasih Logistik",
    "address": "Kawasan Berikat Nusantara (KBN) Jl. Pontianak Blok C 02/09A, Marunda, "
               "Cilincing, Jakarta Utara - 14120",
    "phone": "(021) 38874030",
    "email": "rudy@mkl-jakarta.com / info@mkl-jakarta.com",
    "website": "www.mkl-jakarta.com",
    "bank_account": "6910492436",
    "bank_branch": "BANK BCA CAB. YOS SUDARSO",
}

JOB_ORDER_INVOICE_TYPES = {
    "penumpukan": {
        "title": "INVOICE PENUMPUKAN",
        "subtitle": "Biaya Penumpukan Container",
        "color": "#1e3a8a",
    },
    "do": {
        "title": "INVOICE DO",
        "subtitle": "Delivery Order",
        "color": "#228b22",
    },
    "behandle": {
        "title": "INVOICE BEHANDLE",
        "subtitle": "Biaya Behandle / Pemeriksaan",
        "color": "#dc2626",
    },
}

QUOTATION_SECTIONS = (
    ("rates", "RATES", "#3b82f6"),
    ("green_line", "GREEN LINE", "#22c55e"),
    ("red_line", "RED LINE", "#ef4444"),
)


def _underscored(text: str) -> str:
    return re.sub(r"\s+", "_", text.strip())


def job_order_invoice_filename(invoice_type: str, job_order_number: Optional[str]) -> str:
    title = _underscored(JOB_ORDER_INVOICE_TYPES[invoice_type]["title"])
    return f"{title}_{job_order_number}.pdf" if job_order_number else f"{title}.pdf"


def quotation_filename(quotation_number: Optional[str], customer_name: Optional[str]) -> str:
    parts = ["Penawaran"]
    if quotation_number:
        parts.append(quotation_number)
    if customer_name and customer_name.strip():
        parts.append(_underscored(customer_name))
    return "_".join(parts) + ".pdf"


def invoice_final_filename(invoice_number: str) -> str:
    return f"Invoice_Final_{invoice_number}.pdf"


def _rate(value) -> str:
    return "-" if value is None else f"IDR {format_number_id(value)}"


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else "-"


class DocumentRenderer:
    """Builds A4 PDFs with reportlab platypus; every render returns bytes"""

    def __init__(self, today: Optional[date] = None):
        self.today = today or date.today()
        styles = getSampleStyleSheet()
        self.normal = styles['Normal']
        self.small = ParagraphStyle('Small', parent=styles['Normal'], fontSize=8,
                                    textColor=colors.HexColor('#646464'))
        self.company = ParagraphStyle('Company', parent=styles['Heading1'], fontSize=16,
                                      textColor=colors.HexColor('#1e3a8a'), spaceAfter=2)
        self.title = ParagraphStyle('DocTitle', parent=styles['Heading2'], alignment=TA_CENTER, fontSize=14)
        self.subtitle = ParagraphStyle('DocSubtitle', parent=styles['Normal'], alignment=TA_CENTER, fontSize=10)
        self.right = ParagraphStyle('Right', parent=styles['Normal'], alignment=TA_RIGHT, fontSize=9)

    def _build(self, elements: List[Any]) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4,
                                leftMargin=0.6 * inch, rightMargin=0.6 * inch,
                                topMargin=0.5 * inch, bottomMargin=0.5 * inch)
        doc.build(elements)
        return buffer.getvalue()

    def _letterhead(self) -> List[Any]:
        return [
            Paragraph(COMPANY_INFO["name"], self.company),
            Paragraph(escape(COMPANY_INFO["address"]), self.small),
            Paragraph(f"Phone: {COMPANY_INFO['phone']}", self.small),
            Paragraph(f"E-mail: {COMPANY_INFO['email']}", self.small),
            Paragraph(f"Web: {COMPANY_INFO['website']}", self.small),
            Spacer(1, 0.25 * inch),
        ]

    def _signature(self) -> List[Any]:
        return [
            Spacer(1, 0.5 * inch),
            Paragraph(f"Jakarta, {format_date_id(self.today)}", self.right),
            Spacer(1, 0.6 * inch),
            Paragraph(f"<b>{COMPANY_INFO['name']}</b>", self.right),
        ]

    # ==================== JOB ORDER INVOICE ====================

    def job_order_invoice(self, job_order: Dict[str, Any], invoice_type: str) -> bytes:
        if invoice_type not in JOB_ORDER_INVOICE_TYPES:
            raise ValueError(f"Jenis invoice tidak dikenal: {invoice_type}")
        config = JOB_ORDER_INVOICE_TYPES[invoice_type]

        elements = self._letterhead()
        title_style = ParagraphStyle('TypedTitle', parent=self.title, textColor=colors.HexColor(config["color"]))
        elements.append(Paragraph(config["title"], title_style))
        elements.append(Paragraph(config["subtitle"], self.subtitle))
        elements.append(Spacer(1, 0.2 * inch))

        jo = job_order
        rows = [
            ["No. Job Order", _text(jo.get("job_order_number")), "No. Invoice", _text(jo.get("no_invoice"))],
            ["BL Number", _text(jo.get("bl_number")), "AJU", _text(jo.get("aju"))],
            ["Party", _text(jo.get("party")), "ETA Kapal", format_date_id(jo.get("eta_kapal"))],
            ["Lokasi", _text(jo.get("lokasi")), "Tujuan", _text(jo.get("tujuan"))],
            ["Status DO", _text(jo.get("status_do")), "Pembayaran DO", _text(jo.get("pembayaran_do"))],
            ["Exp DO", format_date_id(jo.get("exp_do")), "Status BL", _text(jo.get("status_bl"))],
        ]
        table = Table(rows, colWidths=[1.2 * inch, 2.1 * inch, 1.2 * inch, 2.1 * inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#fafafa')),
            ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#c8c8c8')),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 0.2 * inch))

        if jo.get("customer_name"):
            elements.append(Paragraph(f"<b>Customer:</b> {_text(jo['customer_name'])}", self.normal))
        if jo.get("respond_bc"):
            elements.append(Paragraph(f"<b>Respond BC:</b> {_text(jo['respond_bc'])}", self.normal))
        if jo.get("notes"):
            elements.append(Spacer(1, 0.1 * inch))
            elements.append(Paragraph("<b>Catatan:</b>", self.normal))
            elements.append(Paragraph(_text(jo["notes"]), self.small))

        elements.extend(self._signature())
        return self._build(elements)

    # ==================== QUOTATION ====================

    def quotation(self, quotation: Dict[str, Any], items_by_section: Dict[str, List[Dict[str, Any]]]) -> bytes:
        elements = [
            Paragraph("PT MULIA KASIH LOGISTIK", self.title),
            Paragraph("PENAWARAN HARGA / QUOTATION", self.subtitle),
            Spacer(1, 0.2 * inch),
        ]
        if quotation.get("quotation_number"):
            elements.append(Paragraph(f"No: {_text(quotation['quotation_number'])}", self.normal))
        if quotation.get("customer_name"):
            elements.append(Paragraph(f"Kepada Yth: {_text(quotation['customer_name'])}", self.normal))
        if quotation.get("route"):
            elements.append(Paragraph(f"Rute: {_text(quotation['route'])}", self.normal))
        elements.append(Spacer(1, 0.15 * inch))

        for key, label, color in QUOTATION_SECTIONS:
            items = items_by_section.get(key) or []
            if not items:
                continue
            elements.append(Paragraph(f"<b>{label}</b>", self.normal))
            table_data = [["No", "Description", "1-5 CBM (LCL)", "20'", "40'"]]
            for item in items:
                table_data.append([
                    str(item.get("item_no") or ""),
                    Paragraph(_text(item.get("description")), self.normal),
                    _rate(item.get("lcl_rate")),
                    _rate(item.get("fcl_20_rate")),
                    _rate(item.get("fcl_40_rate")),
                ])
            table = Table(table_data, colWidths=[0.4 * inch, 3.0 * inch, 1.1 * inch, 1.1 * inch, 1.1 * inch])
            table.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(color)),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, -1), 8),
                ('ALIGN', (2, 1), (-1, -1), 'RIGHT'),
                ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
                ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ]))
            elements.append(table)
            elements.append(Spacer(1, 0.15 * inch))

        for note in quotation.get("notes") or []:
            elements.append(Paragraph(f"&bull; {_text(note)}", self.small))

        customer = _text(quotation.get("customer_name")) if quotation.get("customer_name") else "___________________"
        signature = Table(
            [["Menyetujui,", "Dengan Hormat,"], ["", ""], [customer, "PT MULIA KASIH LOGISTIK"]],
            colWidths=[3.4 * inch, 3.4 * inch],
            rowHeights=[None, 0.6 * inch, None],
        )
        signature.setStyle(TableStyle([
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (1, 2), (1, 2), 'Helvetica-Bold'),
        ]))
        elements.append(Spacer(1, 0.3 * inch))
        elements.append(signature)
        return self._build(elements)

    # ==================== INVOICE FINAL ====================

    def invoice_final(self, entry: Dict[str, Any], detailed: Dict[str, Any]) -> bytes:
        """Final invoice for one merged entry: line items, down payments and the balance in words"""
        elements = self._letterhead()
        elements.append(Paragraph("INVOICE", self.title))
        elements.append(Spacer(1, 0.15 * inch))

        header = [
            ["No. Invoice", _text(entry.get("invoice_number")), "Tanggal", format_date_id(entry.get("invoice_date"))],
            ["Customer", _text(entry.get("customer_name")), "No. AJU", _text(entry.get("no_aju"))],
            ["Alamat", _text(entry.get("customer_address")), "BL Number", _text(entry.get("bl_number"))],
            ["Party", _text(entry.get("party")), "Vessel", _text(entry.get("flight_vessel"))],
        ]
        table = Table(header, colWidths=[1.0 * inch, 2.4 * inch, 1.0 * inch, 2.4 * inch])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
        ]))
        elements.append(table)
        elements.append(Spacer(1, 0.2 * inch))

        table_data = [["No", "Keterangan", "Jumlah"]]
        for index, item in enumerate(detailed.get("items", []), start=1):
            table_data.append([str(index), Paragraph(_text(item["description"]), self.normal),
                               format_rupiah(item["amount"])])
        table_data.append(["", "TOTAL", format_rupiah(entry.get("combined_total"))])
        for dp in detailed.get("dp_items", []):
            label = f"{dp['label']} ({format_date_id(dp.get('date'))})"
            table_data.append(["", label, f"({format_rupiah(dp['amount'])})"])
        table_data.append(["", "SISA PEMBAYARAN", format_rupiah(entry.get("remaining_amount"))])

        items_table = Table(table_data, colWidths=[0.4 * inch, 4.6 * inch, 1.8 * inch])
        items_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1e40af')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (2, 0), (2, -1), 'RIGHT'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#f3f4f6')),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        elements.append(items_table)
        elements.append(Spacer(1, 0.15 * inch))

        words_style = ParagraphStyle('Words', parent=self.normal, fontSize=9, textColor=colors.HexColor('#dc2626'))
        elements.append(Paragraph(f"<b>TERBILANG : {terbilang(entry.get('remaining_amount'))}</b>", words_style))
        elements.append(Spacer(1, 0.15 * inch))
        elements.append(Paragraph("Pembayaran dapat ditransfer ke rekening:", self.small))
        elements.append(Paragraph(
            f"<b>{COMPANY_INFO['bank_account']} / {COMPANY_INFO['bank_branch']}</b>", self.normal
        ))
        elements.append(Paragraph(f"a/n {COMPANY_INFO['name']}", self.small))

        elements.extend(self._signature())
        return self._build(elements)
