class W:
    """Every score weight and threshold used by the heuristics."""

    # score bands, shared by holder / project / manipulation scoring
    SCORE_MIN = 0
    SCORE_MAX = 100
    BAND_MEDIUM = 20
    BAND_HIGH = 40
    BAND_CRITICAL = 70
    CONFIDENCE_CAP = 95

    # ---- holder ----
    HOLDER_WHALE_PCT = 10
    HOLDER_WHALE = 30
    HOLDER_DOMINANT_PCT = 25
    HOLDER_DOMINANT = 25
    HOLDER_HIGH_BALANCE = 1_000_000_000
    HOLDER_HIGH_BALANCE_PTS = 15
    HOLDER_NEW_DAYS = 7
    HOLDER_NEW = 10
    HOLDER_INSIDER_SCORE = 50
    HOLDER_INSIDER_PCT = 20
    HOLDER_INSIDER = 20
    HOLDER_ADDRESS_SHAPE = 5
    HOLDER_RAPID_MIN_TXNS = 10
    HOLDER_RAPID_MIN_INBOUND = 8
    HOLDER_RAPID = 20
    # is_whale boolean, looser than the whale flag
    HOLDER_IS_WHALE_PCT = 5
    HOLDER_IS_WHALE_BALANCE = 500_000_000
    HOLDER_CONFIDENCE_BASE = 60
    HOLDER_CONFIDENCE_STEP = 8

    # ---- project ----
    PROJECT_TOP_N = 10
    PROJECT_FEW_HOLDERS = 5
    PROJECT_FEW_HOLDERS_PTS = 20
    PROJECT_WHALE_PCT = 5
    PROJECT_WHALE_MIN = 2
    PROJECT_WHALE_EACH = 10
    PROJECT_CONCENTRATION = 60
    PROJECT_CONCENTRATION_PTS = 30
    PROJECT_CONCENTRATION_WARN = 50
    PROJECT_SUSPICIOUS_VOLUME = 25
    PROJECT_BOT_ACTIVITY = 15
    PROJECT_SELL_PRESSURE = 20
    PROJECT_SELL_PRESSURE_PTS = 20
    PROJECT_BUY_PRESSURE = 80
    PROJECT_CONFIDENCE_BASE = 50
    PROJECT_CONFIDENCE_STEP = 5

    # ---- trading / social metrics ----
    HIGH_ACTIVITY_TXNS = 500
    SUSPICIOUS_VOLUME_USD = 1_000_000
    LOW_LIQUIDITY_USD = 100_000
    LOW_ENGAGEMENT_LIKES = 2
    BOT_LOW_ENGAGEMENT_SHARE = 0.7
    BOT_MIN_MENTIONS = 10
    VIRAL_ENGAGEMENT = 10_000
    INFLUENCER_LIKES = 100
    SENTIMENT_MULTIPLIER = 2

    # ---- manipulation report ----
    REPORT_EXTREME_CONCENTRATION = 70
    REPORT_EXTREME_CONCENTRATION_PTS = 35
    REPORT_HIGH_CONCENTRATION = 50
    REPORT_HIGH_CONCENTRATION_PTS = 20
    REPORT_WHALE_MIN = 3
    REPORT_WHALES = 15
    REPORT_WASH_SCALE = 60
    REPORT_WASH_PCT = 40
    REPORT_WASH = 25
    REPORT_SUSPICIOUS_VOLUME = 20
    REPORT_SELL_PRESSURE = 20
    REPORT_SELL_PRESSURE_PTS = 20
    REPORT_PUMP_PRESSURE = 90
    REPORT_PUMP_PRESSURE_PTS = 15
    REPORT_BOT_ACTIVITY = 15
    REPORT_VIRAL_MIN_SCORE = 30
    REPORT_VIRAL_ANOMALY = 10
    REPORT_UNIFORM_MENTIONS = 100
    REPORT_UNIFORM_SENTIMENT = 80
    REPORT_UNIFORM = 10
    REPORT_INFLUENCER_MIN = 5
    REPORT_INFLUENCERS = 5
    REPORT_SAFE_BUY_PRESSURE = 60
    REPORT_CONFIDENCE_BASE = 50
    REPORT_CONFIDENCE_STEP = 6
