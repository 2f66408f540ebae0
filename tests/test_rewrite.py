import copy

from card_localizer.rewrite import build_patch, render_local_tag, replace_images_with_html

FIELDS = ("data.first_mes", "data.alternate_greetings", "data.creator_notes")

URL_MAP = {
    "https://x.test/a.png": "/user/images/c/0.png",
    "https://x.test/b.jpg": "/user/images/c/1.jpg",
}


def test_render_local_tag():
    assert render_local_tag("x", "/p.png") == '<img alt="x" src="/p.png">'


class TestReplaceImagesWithHtml:
    def test_both_dialects(self):
        text = 'See [cover](https://x.test/a.png) and <img src="https://x.test/b.jpg" alt="b">'
        assert replace_images_with_html(text, URL_MAP) == (
            'See <img alt="cover" src="/user/images/c/0.png"> and '
            '<img alt="b" src="/user/images/c/1.jpg">'
        )

    def test_unmapped_left_verbatim(self):
        text = "[a](https://x.test/a.png) [z](https://x.test/z.png)"
        assert replace_images_with_html(text, URL_MAP) == (
            '<img alt="a" src="/user/images/c/0.png"> [z](https://x.test/z.png)'
        )

    def test_identical_spans_each_replaced(self):
        text = "[a](https://x.test/a.png) then [a](https://x.test/a.png)"
        assert replace_images_with_html(text, URL_MAP) == (
            '<img alt="a" src="/user/images/c/0.png"> then '
            '<img alt="a" src="/user/images/c/0.png">'
        )

    def test_already_local_is_unchanged(self):
        text = '<img alt="cover" src="/user/images/c/0.png">'
        assert replace_images_with_html(text, URL_MAP) == text

    def test_empty_map(self):
        text = "[a](https://x.test/a.png)"
        assert replace_images_with_html(text, {}) == text

    def test_non_string_passthrough(self):
        assert replace_images_with_html(5, URL_MAP) == 5


class TestBuildPatch:
    def test_only_changed_fields(self):
        record = {
            "data": {
                "first_mes": "[a](https://x.test/a.png)",
                "alternate_greetings": ["no urls here", "https://x.test/a.png bare text"],
                "creator_notes": "nothing",
            }
        }
        patch = build_patch(record, FIELDS, URL_MAP)
        assert patch == {"data": {"first_mes": '<img alt="a" src="/user/images/c/0.png">'}}

    def test_array_written_whole(self):
        record = {
            "data": {
                "alternate_greetings": [
                    "plain",
                    '<img src="https://x.test/b.jpg">',
                    None,
                ],
            }
        }
        patch = build_patch(record, FIELDS, URL_MAP)
        assert patch == {
            "data": {
                "alternate_greetings": [
                    "plain",
                    '<img alt="" src="/user/images/c/1.jpg">',
                    None,
                ]
            }
        }

    def test_record_not_mutated(self):
        record = {"data": {"first_mes": "[a](https://x.test/a.png)", "alternate_greetings": ["[b](https://x.test/b.jpg)"]}}
        before = copy.deepcopy(record)
        build_patch(record, FIELDS, URL_MAP)
        assert record == before

    def test_empty_when_nothing_changes(self):
        record = {"data": {"first_mes": "[z](https://x.test/z.png)"}}
        assert build_patch(record, FIELDS, URL_MAP) == {}

    def test_idempotent_on_localized_record(self):
        record = {"data": {"first_mes": "[a](https://x.test/a.png)"}}
        patch = build_patch(record, FIELDS, URL_MAP)
        localized = {"data": {**record["data"], **patch["data"]}}
        assert build_patch(localized, FIELDS, URL_MAP) == {}

    def test_missing_and_wrong_typed_fields(self):
        record = {"data": {"first_mes": 12, "creator_notes": {"x": 1}}}
        assert build_patch(record, FIELDS, URL_MAP) == {}

    def test_nested_path_strips_root(self):
        record = {"data": {"extensions": {"notes": "[a](https://x.test/a.png)"}}}
        patch = build_patch(record, ["data.extensions.notes"], URL_MAP)
        assert patch == {"data": {"extensions": {"notes": '<img alt="a" src="/user/images/c/0.png">'}}}

    def test_path_outside_root_nests_under_root(self):
        record = {"card": {"notes": "[a](https://x.test/a.png)"}}
        patch = build_patch(record, ["card.notes"], URL_MAP)
        assert patch == {"data": {"card": {"notes": '<img alt="a" src="/user/images/c/0.png">'}}}
