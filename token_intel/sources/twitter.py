"""
Twitter/X recent search and the social metrics derived from it.
"""
from typing import List, Optional

import httpx

from ..config import settings
from ..risk_engine.weights import W
from ..utils.numbers import round_half_up

TWITTER_BASE = "https://api.twitter.com/2"
MAX_RESULTS = 20
TOP_TWEETS = 3


async def _get(path: str, params: dict) -> Optional[dict]:
    if not settings.TWITTER_BEARER_TOKEN:
        return None
    headers = {"Authorization": f"Bearer {settings.TWITTER_BEARER_TOKEN}"}
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        r = await client.get(f"{TWITTER_BASE}{path}", params=params, headers=headers)
        r.raise_for_status()
        return r.json()


async def search_token_mentions(symbol: str, name: str) -> List[dict]:
    query = f'(${symbol} OR "{name}") -is:retweet lang:en'
    data = await _get("/tweets/search/recent", {
        "query": query,
        "max_results": MAX_RESULTS,
        "tweet.fields": "created_at,public_metrics,author_id",
    })
    return (data or {}).get("data") or []


def _likes(t: dict) -> int:
    return int((t.get("public_metrics") or {}).get("like_count") or 0)


def _retweets(t: dict) -> int:
    return int((t.get("public_metrics") or {}).get("retweet_count") or 0)


def empty_sentiment() -> dict:
    return {
        "mention_count": 0,
        "total_engagement": 0,
        "avg_likes": 0,
        "avg_retweets": 0,
        "sentiment_score": 0,
        "top_tweets": [],
        "influencer_mentions": 0,
        "is_viral": False,
        "is_suspicious_activity": False,
    }


def summarize_sentiment(tweets: List[dict]) -> dict:
    if not tweets:
        return empty_sentiment()

    n = len(tweets)
    likes = sum(_likes(t) for t in tweets)
    retweets = sum(_retweets(t) for t in tweets)
    engagement = likes + retweets

    # many mentions with almost no likes looks like a bot farm
    low = sum(1 for t in tweets if _likes(t) < W.LOW_ENGAGEMENT_LIKES)

    return {
        "mention_count": n,
        "total_engagement": engagement,
        "avg_likes": round_half_up(likes / n),
        "avg_retweets": round_half_up(retweets / n),
        "sentiment_score": min(100, round_half_up(engagement / n * W.SENTIMENT_MULTIPLIER)),
        "top_tweets": sorted(tweets, key=_likes, reverse=True)[:TOP_TWEETS],
        "influencer_mentions": sum(1 for t in tweets if _likes(t) > W.INFLUENCER_LIKES),
        "is_viral": engagement > W.VIRAL_ENGAGEMENT,
        "is_suspicious_activity": low > n * W.BOT_LOW_ENGAGEMENT_SHARE and n > W.BOT_MIN_MENTIONS,
    }


async def analyze_social_sentiment(symbol: str, name: str) -> dict:
    return summarize_sentiment(await search_token_mentions(symbol, name))
