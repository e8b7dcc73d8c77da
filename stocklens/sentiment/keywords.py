"""Investment-domain keyword dictionaries."""

# Counted by substring occurrence
JAPANESE_NEGATIVE_WORDS = [
    # Crashes
    "暴落",
    "大暴落",
    "急落",
    "下落",
    "続落",
    "反落",
    # Crisis and risk
    "危険",
    "危機",
    "リスク",
    "懸念",
    "不安",
    "恐怖",
    "警戒",
    # Losses
    "損失",
    "赤字",
    "減益",
    "下方修正",
    "損切り",
    "塩漬け",
    # Market conditions
    "低迷",
    "不振",
    "悪化",
    "停滞",
    "下降",
    "縮小",
    # Emotions
    "最悪",
    "ひどい",
    "やばい",
    "ダメ",
    "終わり",
    "崩壊",
    # Selling pressure
    "売られる",
    "売り圧力",
    "投げ売り",
    "手放す",
    "撤退",
    # Other
    "失敗",
    "問題",
    "トラブル",
    "困難",
    "厳しい",
    "弱気",
    "ショック",
    "パニック",
    "クラッシュ",
    "破綻",
    "倒産",
]

# Counted as case-insensitive whole words
ENGLISH_NEGATIVE_WORDS = [
    # Crashes
    "crash",
    "plunge",
    "plummet",
    "tumble",
    "dive",
    "collapse",
    "tank",
    "drop",
    "fall",
    "decline",
    "slump",
    "sink",
    # Crisis and risk
    "crisis",
    "risk",
    "danger",
    "fear",
    "panic",
    "worry",
    "concern",
    "threat",
    "warning",
    "alert",
    # Losses
    "loss",
    "losses",
    "losing",
    "deficit",
    "negative",
    "down",
    # Market conditions
    "bear",
    "bearish",
    "downturn",
    "recession",
    "depression",
    "weak",
    "weakness",
    "poor",
    "bad",
    "worst",
    "terrible",
    # Selling pressure
    "sell-off",
    "selloff",
    "selling",
    "dump",
    "dumping",
    # Other
    "fail",
    "failure",
    "problem",
    "trouble",
    "difficult",
    "shock",
    "bankruptcy",
    "bankrupt",
    "disaster",
    "catastrophe",
]

# Red-flag keywords for per-post classification, matched as lower-case substrings
NEGATIVE_KEYWORDS = [
    "fraud",
    "scam",
    "lawsuit",
    "investigation",
    "SEC investigation",
    "accounting issue",
    "accounting fraud",
    "insider trading",
    "bankruptcy",
    "default",
    "リーク",
    "詐欺",
    "訴訟",
    "不正会計",
    "破綻",
    "plunge",
    "crash",
    "暴落",
    "急落",
]

POSITIVE_KEYWORDS = [
    "breakthrough",
    "innovation",
    "growth",
    "bullish",
    "upgrade",
    "beat estimates",
    "strong earnings",
    "undervalued",
    "turnaround",
    "deep value",
    "成長",
    "革新",
    "好調",
    "上昇",
    "割安",
]
