from reportlab.lib.colors import black, green, orange, red, yellow
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..risk_engine.weights import W
from ..utils.numbers import fmt_amount

MAX_LINE = 110


def risk_color(score: int):
    if score >= W.BAND_CRITICAL:
        return red
    if score >= W.BAND_HIGH:
        return orange
    if score >= W.BAND_MEDIUM:
        return yellow
    return green


def _line(c, y, step=16):
    """Move the cursor down, starting a new page near the bottom margin."""
    if y < 80:
        c.showPage()
        c.setFont("Helvetica", 12)
        return A4[1] - 60
    return y - step


def _money(v) -> str:
    return f"${fmt_amount(v)}" if v is not None else "N/A"


def build_pdf(result: dict, out_path: str):
    """Render a project intelligence result (as a plain dict) to ``out_path``."""
    c = canvas.Canvas(out_path, pagesize=A4)
    h = A4[1]

    c.setFont("Helvetica-Bold", 18)
    c.drawString(40, h - 60, f"Token Risk Report: {result.get('name', '')} ({result.get('symbol', '')})")

    c.setFont("Helvetica", 12)
    y = h - 90
    c.drawString(40, y, f"Chain: {result.get('chain', 'N/A')}"); y = _line(c, y, 15)
    c.drawString(40, y, f"Contract: {result.get('contract_address') or 'N/A'}"); y = _line(c, y, 15)

    score = int(result.get("risk_score", 0))
    c.drawString(40, y, f"Risk Score: {score} / 100"); y = _line(c, y, 15)
    bar_h = 15
    bar_y = y - bar_h - 1
    c.setFillColor(risk_color(score))
    c.rect(40, y - 14, width=max(0, min(100, score)) * 4, height=bar_h, fill=1, stroke=0)
    c.setFillColor(black); y = _line(c, y, 15)
    c.drawString(40, y, f"Risk Level: {result.get('overall_risk', 'N/A')}   Confidence: {result.get('confidence', 0)}%")

    y = bar_y - 12
    y = _line(c, y, 30)

    c.setFont("Helvetica-Bold", 12); c.drawString(40, y, "Market"); y = _line(c, y, 20)
    c.setFont("Helvetica", 12)
    c.drawString(40, y, f"Price: {_money(result.get('price_usd'))}"); y = _line(c, y, 15)
    c.drawString(40, y, f"Market cap: {_money(result.get('market_cap'))}"); y = _line(c, y, 15)
    c.drawString(40, y, f"Volume 24h: {_money(result.get('volume_24h'))}"); y = _line(c, y, 15)
    c.drawString(40, y, f"Liquidity: {_money(result.get('liquidity'))}"); y = _line(c, y, 15)
    bp = result.get("buy_pressure")
    c.drawString(40, y, f"Buy pressure: {bp if bp is not None else 'N/A'}%"); y = _line(c, y, 24)

    c.setFont("Helvetica-Bold", 12); c.drawString(40, y, "Holders"); y = _line(c, y, 16)
    c.setFont("Helvetica", 11)
    c.drawString(50, y, f"Tracked: {result.get('holder_count', 0)}  Whales: {result.get('whale_count', 0)}  "
                        f"Top 10 share: {result.get('concentration', 0):.1f}%"); y = _line(c, y, 14)
    for th in result.get("top_holders", []):
        c.drawString(50, y, f"- {th['address']}: {th['percentage']:.2f}%"); y = _line(c, y, 14)

    y = _line(c, y, 10)
    c.setFont("Helvetica-Bold", 12); c.drawString(40, y, "Social"); y = _line(c, y, 16)
    c.setFont("Helvetica", 11)
    c.drawString(50, y, f"Mentions: {result.get('twitter_mentions', 0)}  Sentiment: {result.get('sentiment_score', 0)}"
                        f"  Viral: {'yes' if result.get('is_viral') else 'no'}"); y = _line(c, y, 14)
    for label in ("website", "twitter", "telegram"):
        if result.get(label):
            c.drawString(50, y, f"{label.capitalize()}: {result[label]}"[:MAX_LINE]); y = _line(c, y, 14)

    y = _line(c, y, 10)
    c.setFont("Helvetica-Bold", 12); c.drawString(40, y, "Flags:"); y = _line(c, y, 18)
    c.setFont("Helvetica", 11)
    flags = result.get("flags") or ["No risk flags raised."]
    for f in flags:
        c.drawString(50, y, f"- {f}"[:MAX_LINE])
        y = _line(c, y, 16)

    c.setFont("Helvetica", 9)
    c.drawString(40, 40, f"Generated {result.get('analyzed_at', '')}")
    c.showPage()
    c.save()
