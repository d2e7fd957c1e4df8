"""LLM 回复 JSON 提取测试"""

import pytest

from tripvoice.parsing.json_block import extract_json_block
from tripvoice.shared.exceptions import MalformedResponseError


def test_plain_json():
    assert extract_json_block('{"amount": 50}') == {"amount": 50}


def test_code_fence():
    assert extract_json_block('```json\n{"destination": "上海"}\n```') == {"destination": "上海"}


def test_json_surrounded_by_prose():
    content = '好的，结果如下：{"duration": 2, "preferences": ["美食"]} 希望有帮助'
    assert extract_json_block(content) == {"duration": 2, "preferences": ["美食"]}


@pytest.mark.parametrize("content", ["", "没有 JSON", "{not json}", "[1, 2]"])
def test_malformed(content):
    with pytest.raises(MalformedResponseError):
        extract_json_block(content)
