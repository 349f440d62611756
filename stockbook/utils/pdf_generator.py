from fpdf import FPDF
from fpdf.enums import XPos, YPos

COMPANY_NAME = "STOCKBOOK"
COMPANY_TAGLINE = "Inventory & Sales Management"


def _latin1(text) -> str:
    # Las fuentes core de FPDF solo soportan latin-1
    return str(text or "").encode("latin-1", "replace").decode("latin-1")


class PDFInvoice(FPDF):
    def header(self):
        self.set_font("Helvetica", "B", 20)
        self.set_text_color(33, 37, 41)
        self.cell(0, 10, COMPANY_NAME, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="L")

        self.set_font("Helvetica", "", 10)
        self.set_text_color(108, 117, 125)
        self.cell(0, 5, COMPANY_TAGLINE, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="L")
        self.ln(5)

        self.set_draw_color(200, 200, 200)
        self.line(10, 35, 200, 35)
        self.ln(10)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(128)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")


def generate_invoice_pdf(sale) -> bytes:
    pdf = PDFInvoice()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)

    # --- ENCABEZADO ---
    pdf.set_font("Helvetica", "B", 14)
    pdf.set_text_color(0, 0, 0)
    pdf.cell(100, 10, _latin1(f"INVOICE {sale.invoice_number or sale.id}"), align="L")

    pdf.set_font("Helvetica", "", 10)
    pdf.set_text_color(50, 50, 50)
    created = sale.created_at.strftime("%Y-%m-%d %H:%M") if sale.created_at else ""
    pdf.cell(90, 10, f"Date: {created}", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="R")
    pdf.ln(5)

    # --- CLIENTE ---
    pdf.set_fill_color(245, 247, 250)
    pdf.rect(10, pdf.get_y(), 190, 25, "F")

    pdf.set_xy(15, pdf.get_y() + 5)
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(30, 5, "Customer:")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(100, 5, _latin1(sale.customer), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_x(15)
    pdf.set_font("Helvetica", "B", 10)
    pdf.cell(30, 5, "Payment:")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(100, 5, _latin1(f"{sale.payment_method.value} ({sale.status.value})"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(15)

    # --- TABLA ---
    # Columnas: Producto(110), Cant(20), Precio(30), Subtotal(30)
    pdf.set_font("Helvetica", "B", 9)
    pdf.set_fill_color(33, 37, 41)
    pdf.set_text_color(255, 255, 255)
    pdf.cell(110, 8, "PRODUCT", align="L", fill=True)
    pdf.cell(20, 8, "QTY", align="C", fill=True)
    pdf.cell(30, 8, "PRICE", align="R", fill=True)
    pdf.cell(30, 8, "SUBTOTAL", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="R", fill=True)

    pdf.set_text_color(0, 0, 0)
    pdf.set_font("Helvetica", "", 9)
    fill = False
    for line in sale.items:
        if fill:
            pdf.set_fill_color(248, 249, 250)
        else:
            pdf.set_fill_color(255, 255, 255)
        pdf.cell(110, 8, _latin1(line.name)[:60], align="L", fill=fill)
        pdf.cell(20, 8, str(line.quantity), align="C", fill=fill)
        pdf.cell(30, 8, f"${line.price:,.2f}", align="R", fill=fill)
        pdf.cell(30, 8, f"${line.subtotal:,.2f}", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="R", fill=fill)
        fill = not fill
        pdf.set_draw_color(230, 230, 230)
        pdf.line(10, pdf.get_y(), 200, pdf.get_y())

    # --- TOTAL ---
    pdf.ln(5)
    pdf.set_x(140)
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_fill_color(240, 240, 240)
    pdf.cell(30, 10, "TOTAL", align="R", fill=True)
    pdf.cell(30, 10, f"${sale.total:,.2f}", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="R", fill=True)

    if sale.notes:
        pdf.ln(10)
        pdf.set_font("Helvetica", "B", 9)
        pdf.cell(0, 5, "Notes:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 8)
        pdf.multi_cell(0, 4, _latin1(sale.notes))

    return bytes(pdf.output())
