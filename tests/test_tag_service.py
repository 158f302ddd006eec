"""Tests for the user-facing tag commands."""
from roam_tags.models.schema import LinkElement, LinkType
from roam_tags.services.link_redirector import LinkHandlerChain, LinkOpenResult
from roam_tags.services.tag_service import TagService
from roam_tags.storage.document import Document
from roam_tags.storage.markdown_parser import format_id_link
from tests.fakes import FakeSelector


def note_document(note_id, body="Body"):
    return Document(f"---\nid: {note_id}\ntitle: My Note\n---\n\n# My Note\n\n{body}")


class TestReadTag:
    """Tests for choosing a tag."""

    def test_candidates_are_the_sorted_tags(self, tag_service, selector, add_note):
        add_note("zeta")
        add_note("Some Note")
        add_note("alpha")
        selector.choice = "alpha"
        assert tag_service.read_tag() == "alpha"
        assert selector.calls == [(["alpha", "zeta"], "Tag")]

    def test_empty_choice_is_none(self, tag_service, selector):
        selector.choice = ""
        assert tag_service.read_tag() is None


class TestTagNote:
    """Tests for tagging a whole document."""

    def test_uses_the_selected_tag(self, tag_service, selector, add_note):
        tag_id = add_note("python")
        selector.choice = "python"
        document = Document("Body")
        assert tag_service.tag_note(document) == "python"
        assert document.text == "Body\n\n+ tags :: " + format_id_link(tag_id, "python")

    def test_explicit_tag_skips_the_selector(self, tag_service, selector, add_note):
        add_note("python")
        tag_service.tag_note(Document("Body"), "python")
        assert selector.calls == []

    def test_cancelled_selection_leaves_the_document(self, tag_service, selector):
        selector.choice = None
        document = Document("Body")
        assert tag_service.tag_note(document) is None
        assert document.text == "Body"

    def test_new_tag_is_created_on_confirmation(
        self, tag_service, notifier, tag_repository
    ):
        document = Document("Body")
        tag_service.tag_note(document, "brand-new")
        assert notifier.questions == ["Create tag «brand-new»?"]
        assert tag_repository.tag_exists("brand-new")

    def test_tag_at_point(self, tag_service, selector, add_note):
        tag_id = add_note("python")
        selector.choice = "python"
        document = Document("I like  a lot", point=7)
        assert tag_service.tag_at_point(document) == "python"
        assert document.text == "I like " + format_id_link(tag_id, "python") + " a lot"


class TestSetFileTags:
    """Tests for replacing the tag line."""

    def test_replaces_existing_links(self, tag_service, add_note):
        old = add_note("old")
        alpha = add_note("alpha")
        beta = add_note("beta")
        document = Document("Body\n+ tags :: " + format_id_link(old, "old"))
        assert tag_service.set_file_tags(document, ["alpha", "beta"]) == ["alpha", "beta"]
        assert document.text == (
            "Body\n+ tags :: "
            + format_id_link(alpha, "alpha")
            + " "
            + format_id_link(beta, "beta")
        )

    def test_declined_tags_are_skipped(self, tag_service, notifier, add_note):
        alpha = add_note("alpha")
        notifier.answer = False
        document = Document("Body")
        assert tag_service.set_file_tags(document, ["missing", "alpha"]) == ["alpha"]
        assert document.text.endswith(" " + format_id_link(alpha, "alpha"))

    def test_empty_list_clears(self, tag_service):
        document = Document("Body\n+ tags :: stuff")
        assert tag_service.set_file_tags(document, []) == []
        assert document.text == "Body\n+ tags ::"


class TestOpenTag:
    """Tests for opening a tag's backlink view."""

    def test_existing_tag(self, tag_service, view, add_note):
        tag_id = add_note("python")
        source = add_note("A Note", links=[(tag_id, "python")])
        assert tag_service.open_tag("python") is LinkOpenResult.HANDLED
        shown_id, title, backlinks = view.shown[0]
        assert (shown_id, title) == (tag_id, "python")
        assert [b.source_id for b in backlinks] == [source]

    def test_missing_tag(self, tag_service, notifier, view):
        assert tag_service.open_tag("rust") is LinkOpenResult.NOT_HANDLED
        assert notifier.messages == ["No tag «rust»"]
        assert view.shown == []

    def test_never_creates(self, tag_service, notifier, note_index):
        tag_service.open_tag("rust")
        assert notifier.questions == []
        assert note_index.count_notes() == 0

    def test_uses_the_selector(self, tag_service, selector, view, add_note):
        add_note("python")
        selector.choice = "python"
        tag_service.open_tag()
        assert selector.calls[0][1] == "Open tag"
        assert view.shown[0][1] == "python"


class TestDocumentTags:
    """Tests for listing a document's tags."""

    def test_tags_of_an_indexed_note(self, tag_service, add_note):
        alpha = add_note("alpha")
        beta = add_note("beta")
        note_id = add_note("Tagged", links=[(beta, "beta"), (alpha, "alpha")])
        assert tag_service.document_tags(note_document(note_id)) == ["beta", "alpha"]

    def test_document_without_id(self, tag_service):
        assert tag_service.document_tags(Document("no frontmatter")) == []


class TestFollowLink:
    """Tests for following the link under point."""

    def test_tag_link_opens_backlinks(self, tag_service, view, notifier, add_note):
        tag_id = add_note("python")
        link = format_id_link(tag_id, "python")
        document = Document("See " + link)
        assert tag_service.follow_link(document, 5) is LinkOpenResult.HANDLED
        assert view.shown[0][0] == tag_id
        assert notifier.messages == []

    def test_note_link_falls_through_to_open(
        self, tag_service, view, notifier, add_note, test_config
    ):
        note_id = add_note("Regular Note", filename="regular.md")
        document = Document(format_id_link(note_id, "Regular Note"))
        assert tag_service.follow_link(document, 0) is LinkOpenResult.HANDLED
        assert view.shown == []
        assert notifier.messages == [f"Open {test_config.get_notes_dir() / 'regular.md'}"]

    def test_web_link_falls_through(self, tag_service, notifier):
        document = Document("[site](https://example.com)")
        tag_service.follow_link(document, 1)
        assert notifier.messages == ["Open https://example.com"]

    def test_unknown_note(self, tag_service, notifier):
        document = Document(format_id_link("missing", "gone"))
        assert tag_service.follow_link(document, 0) is LinkOpenResult.NOT_HANDLED
        assert notifier.messages == ["Unknown note missing"]

    def test_no_link_at_point(self, tag_service, notifier):
        document = Document("plain text")
        assert tag_service.follow_link(document, 3) is LinkOpenResult.NOT_HANDLED
        assert notifier.messages == ["No link at point"]

    def test_shared_chain(self, test_config, note_index, notifier, view, add_note):
        chain = LinkHandlerChain()
        service = TagService(
            test_config, note_index, FakeSelector(), notifier, view, chain=chain
        )
        assert chain.names == ["tag-backlinks"]
        tag_id = add_note("python")
        link = LinkElement(LinkType.ID, tag_id, "python", 0, 0)
        assert chain.dispatch(link) is LinkOpenResult.HANDLED
        assert service.chain is chain
