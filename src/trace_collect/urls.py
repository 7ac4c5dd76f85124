"""Default URL list sampled when no override is configured."""

from __future__ import annotations

DEFAULT_TEST_URLS: tuple[str, ...] = (
    "https://cnn.com",
    "https://www.espn.com/",
    "https://www.flipkart.com",
    "https://www.hulu.com/",
    "https://www.imdb.com/",
    "https://www.instagram.com/",
    "https://www.istockphoto.com/",
    "https://www.khanacademy.org/",
    "https://www.netflix.com/",
    "https://www.nytimes.com/",
    "https://www.reddit.com/",
    "https://www.sfgate.com/",
    "https://www.shopping.com/",
    "https://www.sina.com.cn/",
    "https://www.theverge.com/",
    "https://www.vevo.com/",
    "https://www.wikipedia.org/",
    "https://www.walmart.com/",
    "https://www.codepen.io/",
    "https://www.dawn.com/",
    "https://www.example.com/",
)
