"""
Trading and social metrics derived from raw DEX pairs and tweets.
"""
import pytest

from conftest import make_pair
from token_intel.sources import dexscreener, twitter
from token_intel.utils.numbers import fmt_amount, round_half_up


def tweet(likes, retweets=0):
    return {"text": "gm", "public_metrics": {"like_count": likes, "retweet_count": retweets}}


class TestTradingActivity:

    def test_high_volume_on_thin_liquidity(self):
        pair = make_pair(volume=2_000_000, liquidity=50_000, buys=80, sells=20)
        act = dexscreener.get_trading_activity(pair)
        assert act["is_suspicious_volume"] is True
        assert act["buy_pressure"] == 80
        assert act["buys24h"] == 80 and act["sells24h"] == 20
        assert act["price_change24h"] == -3.5

    def test_no_transactions_is_neutral(self):
        act = dexscreener.get_trading_activity({"txns": {"h24": {}}})
        assert act["buy_pressure"] == 50
        assert act["is_suspicious_volume"] is False
        assert act["liquidity"] == 0.0

    def test_unreported_liquidity_is_not_suspicious(self):
        act = dexscreener.get_trading_activity(make_pair(volume=5_000_000, liquidity=0))
        assert act["is_suspicious_volume"] is False

    def test_buy_pressure_rounds_half_up(self):
        # 1 / 8 = 12.5%
        act = dexscreener.get_trading_activity(make_pair(buys=1, sells=7))
        assert act["buy_pressure"] == 13

    def test_high_activity(self):
        assert dexscreener.get_trading_activity(make_pair(buys=300, sells=201))["is_high_activity"] is True
        assert dexscreener.get_trading_activity(make_pair(buys=300, sells=200))["is_high_activity"] is False


class TestBestPair:

    def test_highest_liquidity_wins(self):
        pairs = [make_pair(liquidity=10, url="a"), make_pair(liquidity=30, url="b"), make_pair(liquidity=20, url="c")]
        assert dexscreener.best_liquidity_pair(pairs)["url"] == "b"

    def test_first_pair_wins_a_tie(self):
        pairs = [make_pair(liquidity=30, url="a"), make_pair(liquidity=30, url="b")]
        assert dexscreener.best_liquidity_pair(pairs)["url"] == "a"

    def test_missing_liquidity_counts_as_zero(self):
        pairs = [{"url": "a"}, make_pair(liquidity=1, url="b")]
        assert dexscreener.best_liquidity_pair(pairs)["url"] == "b"

    def test_no_pairs(self):
        assert dexscreener.best_liquidity_pair([]) is None

    def test_social_links(self):
        links = dexscreener.extract_social_links(make_pair())
        assert links == {
            "website": "https://bonkcoin.com",
            "twitter": "https://twitter.com/bonk_inu",
            "telegram": "https://t.me/bonk",
        }
        assert dexscreener.extract_social_links({}) == {}


class TestSentiment:

    def test_no_tweets(self):
        assert twitter.summarize_sentiment([]) == twitter.empty_sentiment()

    def test_engagement_metrics(self):
        res = twitter.summarize_sentiment([tweet(10, 5), tweet(200, 50)])
        assert res["mention_count"] == 2
        assert res["total_engagement"] == 265
        assert res["avg_likes"] == 105
        assert res["avg_retweets"] == 28
        assert res["sentiment_score"] == 100
        assert res["influencer_mentions"] == 1
        assert res["top_tweets"][0]["public_metrics"]["like_count"] == 200
        assert res["is_viral"] is False

    def test_sentiment_score_scales_average_engagement(self):
        assert twitter.summarize_sentiment([tweet(1), tweet(2)])["sentiment_score"] == 3

    def test_top_tweets_capped(self):
        res = twitter.summarize_sentiment([tweet(i) for i in range(6)])
        assert [t["public_metrics"]["like_count"] for t in res["top_tweets"]] == [5, 4, 3]

    def test_viral(self):
        assert twitter.summarize_sentiment([tweet(6000, 4001)])["is_viral"] is True

    def test_bot_pattern(self):
        assert twitter.summarize_sentiment([tweet(0)] * 11)["is_suspicious_activity"] is True
        # ten mentions is not enough
        assert twitter.summarize_sentiment([tweet(0)] * 10)["is_suspicious_activity"] is False
        # mostly engaged accounts
        mixed = [tweet(0)] * 7 + [tweet(50)] * 5
        assert twitter.summarize_sentiment(mixed)["is_suspicious_activity"] is False


class TestNumbers:

    @pytest.mark.parametrize("x,expected", [(2.5, 3), (2.4, 2), (12.5, 13), (0.5, 1), (99.49, 99)])
    def test_round_half_up(self, x, expected):
        assert round_half_up(x) == expected

    def test_fmt_amount(self):
        assert fmt_amount(359011.064) == "359,011.06"
        assert fmt_amount("garbage") == "0.00"
