"""태그 추출

책/챕터 제목에서 장르 키워드를 찾아 태그 목록을 만든다.
"""

from typing import List

TAG_KEYWORDS = {
    "小說": ["小说", "小說", "novel"],
    "成人": ["成人", "adult", "18+", "r18"],
    "後宮": ["后宫", "後宮", "harem"],
    "人妻": ["人妻", "married"],
    "NTR": ["ntr", "绿帽", "綠帽"],
    "絲襪": ["丝袜", "絲襪", "stocking"],
    "都市": ["都市", "urban", "city"],
    "古裝": ["古装", "古裝", "ancient", "historical"],
    "穿越": ["穿越", "time travel", "transmigration"],
    "重生": ["重生", "reborn", "reincarnation"],
    "玄幻": ["玄幻", "fantasy", "xuanhuan"],
    "武俠": ["武侠", "武俠", "martial arts", "wuxia"],
    "現代": ["现代", "現代", "modern"],
    "校園": ["校园", "校園", "school", "campus"],
    "職場": ["职场", "職場", "workplace", "office"],
    "科幻": ["科幻", "sci-fi", "science fiction"],
    "懸疑": ["悬疑", "懸疑", "mystery", "thriller"],
    "愛情": ["爱情", "愛情", "romance", "love"],
    "BL": ["boys love", "耽美"],
    "GL": ["girls love", "百合"],
}

NOVEL_TAG = "小說"


def extract_tags(title: str, content: str = "") -> List[str]:
    """제목(과 선택적 본문)에서 태그 추출

    하나라도 매칭되면 "小說" 태그를 함께 붙인다.

    Examples:
        >>> extract_tags("都市猎艳人生")
        ['都市', '小說']
    """
    if not title:
        return []

    text = f"{title} {content or ''}".lower()
    found = []
    for tag, keywords in TAG_KEYWORDS.items():
        if any(keyword.lower() in text for keyword in keywords):
            found.append(tag)

    if found and NOVEL_TAG not in found:
        found.append(NOVEL_TAG)
    return found
