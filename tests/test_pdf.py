from reportlab.lib.colors import green, orange, red, yellow

from token_intel.pdf_report.build import build_pdf, risk_color
from token_intel.risk_engine.results import ProjectIntelligence, TopHolder


def project_result(**kw):
    data = dict(
        project_id="p1", name="Bonk", symbol="BONK", chain="solana",
        contract_address="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        price_usd=0.0000234, market_cap=2_188_512.0, volume_24h=None, liquidity=50_000.0,
        holder_count=2, top_holders=[TopHolder(address="a", percentage=80.0), TopHolder(address="b", percentage=20.0)],
        whale_count=2, concentration=100.0, overall_risk="high", risk_score=55,
        flags=["Very few tracked holders: 2", "Top 10 holders control 100.0% of supply"],
        confidence=60, buy_pressure=12, website="https://bonkcoin.com", analyzed_at="2026-01-31T12:00:00+00:00",
    )
    data.update(kw)
    return ProjectIntelligence(**data).model_dump()


def test_risk_color_follows_bands():
    assert risk_color(0) == green
    assert risk_color(20) == yellow
    assert risk_color(40) == orange
    assert risk_color(70) == red


def test_build_pdf(tmp_path):
    out = tmp_path / "report.pdf"
    build_pdf(project_result(), str(out))
    assert out.read_bytes().startswith(b"%PDF")


def test_build_pdf_many_flags(tmp_path):
    out = tmp_path / "long.pdf"
    flags = [f"flag number {i} " + "x" * 200 for i in range(120)]
    build_pdf(project_result(flags=flags, top_holders=[]), str(out))
    assert out.stat().st_size > 0


def test_build_pdf_without_market_data(tmp_path):
    out = tmp_path / "bare.pdf"
    build_pdf(project_result(price_usd=None, market_cap=None, liquidity=None, buy_pressure=None,
                             flags=[], website=None), str(out))
    assert out.read_bytes().startswith(b"%PDF")
