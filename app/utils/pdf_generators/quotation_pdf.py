import os
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from app.core.config import PDF_OUTPUT_DIR, COMPANY_DISPLAY_NAME
from app.models.enums.quotation_status import QuotationStatus
from app.schemas.crm.quotation_schemas import QuotationOut


def _money(currency: str, value) -> str:
    return f"{currency} {float(value or 0):,.2f}"


def render_quotation_pdf(quotation: QuotationOut, output_dir: str = PDF_OUTPUT_DIR) -> str:
    """
    Write a quotation PDF with enquiry/company info, items, totals and,
    for won or received quotations, the purchase-order details.
    Returns the file path.
    """

    # -------------------------------
    # 1️⃣ Prepare file
    # -------------------------------
    os.makedirs(output_dir, exist_ok=True)
    file_name = f"quotation_{quotation.quotation_number}.pdf"
    file_path = os.path.join(output_dir, file_name)

    doc = SimpleDocTemplate(
        file_path,
        pagesize=A4,
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
    )
    styles = getSampleStyleSheet()
    elements = []
    currency = quotation.currency

    # -------------------------------
    # 2️⃣ Header
    # -------------------------------
    elements.append(Paragraph(f"<b>{COMPANY_DISPLAY_NAME}</b>", styles["Title"]))
    elements.append(Spacer(1, 12))

    elements.append(Paragraph(f"<b>Quotation #: </b>{quotation.quotation_number}", styles["Heading2"]))
    if quotation.revision_number:
        elements.append(Paragraph(f"Revision: {quotation.revision_number}", styles["Normal"]))
    if quotation.quotation_date:
        elements.append(Paragraph(f"Date: {quotation.quotation_date.strftime('%d-%m-%Y')}", styles["Normal"]))
    elements.append(Paragraph(f"Status: {quotation.status.value}", styles["Normal"]))
    elements.append(Spacer(1, 10))

    # -------------------------------
    # 3️⃣ Enquiry / Company
    # -------------------------------
    elements.append(Paragraph("<b>Customer</b>", styles["Heading3"]))
    elements.append(Paragraph(f"Company: {quotation.company_name or '-'}", styles["Normal"]))
    elements.append(Paragraph(f"Enquiry: #{quotation.enquiry_id} {quotation.enquiry_subject or ''}", styles["Normal"]))
    elements.append(Spacer(1, 12))

    # -------------------------------
    # 4️⃣ Items
    # -------------------------------
    data = [["#", "Material", "Specifications", "Qty", "Unit Price", "Total"]]

    for i, item in enumerate(quotation.items, start=1):
        data.append([
            i,
            Paragraph(item.material_description, styles["Normal"]),
            Paragraph(item.specifications or "-", styles["Normal"]),
            item.quantity,
            _money(currency, item.price_per_unit),
            _money(currency, item.total),
        ])

    # -------------------------------
    # 5️⃣ Totals
    # -------------------------------
    data.append(["", "", "", "", "Subtotal", _money(currency, quotation.subtotal)])
    data.append(["", "", "", "", "Tax", _money(currency, quotation.tax)])
    data.append(["", "", "", "", "Total", _money(currency, quotation.total_value)])

    table = Table(data, colWidths=[25, 150, 130, 40, 90, 90])
    table.setStyle(
        TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTNAME", (4, -1), (-1, -1), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 1), (-1, -1), colors.whitesmoke),
        ])
    )
    elements.append(table)
    elements.append(Spacer(1, 20))

    # -------------------------------
    # 6️⃣ Terms
    # -------------------------------
    terms = [
        ("GST", f"{quotation.gst}%"),
        ("Packing & Forwarding", f"{quotation.packing_forwarding_percentage}%"),
        ("Transport", _money(currency, quotation.transport_costs)),
        ("Validity", quotation.validity_period),
        ("Payment Terms", quotation.payment_terms),
        ("Delivery Schedule", quotation.delivery_schedule),
        ("Incoterms", quotation.incoterms),
    ]
    elements.append(Paragraph("<b>Terms</b>", styles["Heading3"]))
    for label, value in terms:
        if value:
            elements.append(Paragraph(f"{label}: {value}", styles["Normal"]))

    if quotation.special_instructions:
        elements.append(Spacer(1, 8))
        elements.append(Paragraph("<b>Special Instructions:</b>", styles["Normal"]))
        elements.append(Paragraph(quotation.special_instructions, styles["Normal"]))

    # -------------------------------
    # 7️⃣ Purchase order
    # -------------------------------
    if quotation.status in (QuotationStatus.WON, QuotationStatus.RECEIVED):
        elements.append(Spacer(1, 12))
        elements.append(Paragraph("<b>Purchase Order</b>", styles["Heading3"]))
        elements.append(Paragraph(f"PO Number: {quotation.purchase_order_number or '-'}", styles["Normal"]))
        elements.append(Paragraph(
            f"PO Value: {_money(currency, quotation.po_value) if quotation.po_value is not None else '-'}",
            styles["Normal"],
        ))
        elements.append(Paragraph(f"PO Date: {quotation.po_date or '-'}", styles["Normal"]))
        if quotation.date_of_receipt:
            elements.append(Paragraph(f"Received On: {quotation.date_of_receipt}", styles["Normal"]))

    # -------------------------------
    # ✅ Build PDF
    # -------------------------------
    doc.build(elements)
    return file_path
