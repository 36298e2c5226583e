"""Page urls, lookups, slug history, SEO inheritance and content resolution."""

import warnings

import pytest
from sqlalchemy.exc import SAWarning

from folio.application.cms.create_page import create_page
from folio.application.cms.delete_page import delete_page
from folio.application.cms.update_page import update_page
from folio.domain.invariants.exceptions import (
    AmbiguousPathError,
    InvariantViolation,
    ValidationError,
)
from folio.models import Field, Page, PagePart


class TestDefaultsAndValidation:

    def test_path_title_and_slug_defaults(self, make_page):
        page = make_page("about_us")

        assert page.path == "/"
        assert page.title == "about_us"
        assert page.slug == "about-us"
        assert page.url == "/about-us/"

    def test_generated_slug_is_unique_within_path(self, make_page):
        first = make_page("news", title="News")
        second = make_page("news_archive", title="News")

        assert first.slug == "news"
        assert second.slug == "news-1"

    def test_assigned_slug_is_normalized(self, make_page):
        page = make_page("contact", slug="Contact Us!")
        assert page.slug == "contact-us"

    def test_slug_transliterates_accents(self, make_page):
        page = make_page("cafe", title="Café Crème")
        assert page.slug == "cafe-creme"

    def test_create_emits_no_flush_warnings(self, make_page):
        with warnings.catch_warnings():
            warnings.simplefilter("error", SAWarning)
            page = make_page("about", slug="about")
        assert page.template.identifier == "standard"

    def test_template_is_required(self, app):
        with pytest.raises(ValidationError) as exc:
            create_page(data={"identifier": "orphan", "title": "Orphan"})
        assert "template" in exc.value.errors

    def test_identifier_format_and_uniqueness(self, make_page):
        make_page("about")

        with pytest.raises(ValidationError) as exc:
            make_page("Not Valid")
        assert "identifier" in exc.value.errors

        with pytest.raises(ValidationError) as exc:
            make_page("about", slug="another-about")
        assert exc.value.errors["identifier"] == ["has already been taken"]

    def test_slug_unique_within_path_only(self, make_page):
        make_page("about", slug="about")
        make_page("team", slug="team", path="/about/")
        make_page("company_team", slug="team", path="/company/")

        with pytest.raises(ValidationError) as exc:
            make_page("about_again", slug="About")
        assert "slug" in exc.value.errors

    def test_invalid_nested_field_blocks_whole_save(self, make_page):
        with pytest.raises(ValidationError) as exc:
            make_page("broken", parts=[{
                "identifier": "intro",
                "fields": [{"identifier": "count", "type": "integer", "value": "1.5"}],
            }])

        assert "parts.intro.fields.count.value" in exc.value.errors
        assert Page.query.count() == 0
        assert PagePart.query.count() == 0


class TestUrls:

    def test_url_and_depth(self, make_page):
        about = make_page("about", slug="about")
        team = make_page("team", slug="team", parent_identifier="about")

        assert team.path == "/about/"
        assert team.url == "/about/team/"
        assert about.depth == 0
        assert team.depth == 1
        assert team.split_path == ["about"]

    def test_blank_slug_url_is_root(self):
        assert Page(path="/", slug="").url == "/"

    def test_find_by_url_round_trip(self, make_page):
        pages = [
            make_page("home", slug="home"),
            make_page("about", slug="about"),
            make_page("team", slug="team", path="/about/"),
            make_page("alice", slug="alice", path="/about/team/"),
        ]
        for page in pages:
            assert Page.find_by_url(page.url) is page

    def test_find_by_url_accepts_missing_slashes(self, make_page):
        team = make_page("team", slug="team", path="/about/")
        assert Page.find_by_url("/about/team") is team
        assert Page.find_by_url("about/team/") is team

    def test_find_by_url_misses(self, make_page):
        make_page("about", slug="about")
        assert Page.find_by_url("/nope/") is None
        assert Page.find_by_url("") is None
        assert Page.find_by_url(None) is None

    def test_path_and_slug(self):
        assert Page.path_and_slug("/a/b/c/") == ("/a/b/", "c")
        assert Page.path_and_slug("/c") == ("/", "c")
        assert Page.path_and_slug("/") == ("/", None)


class TestRoot:

    def test_root_is_first_ranked_top_level_page(self, make_page):
        home = make_page("home", slug="home")
        about = make_page("about", slug="about")

        assert Page.root() is home
        assert home.is_root
        assert not about.is_root

        contact = make_page("contact", slug="contact", is_root=True)
        assert Page.root() is contact
        assert [p.position for p in (contact, home, about)] == [1, 2, 3]

    def test_make_root_moves_page_to_top(self, make_page):
        home = make_page("home", slug="home")
        team = make_page("team", slug="team", path="/about/")

        update_page(page_id=team.id, data={"is_root": True})

        assert team.url == "/team/"
        assert Page.homepage() is team
        assert (team.position, home.position) == (1, 2)

    def test_child_pages_are_never_root(self, make_page):
        make_page("team", slug="team", path="/about/")
        assert Page.root() is None


class TestSlugHistory:

    def test_old_slug_redirects(self, make_page):
        page = make_page("news", slug="old")
        update_page(page_id=page.id, data={"slug": "new"})

        assert page.slugs_backup == ["old"]

        found = Page.find_by_url("/old/")
        assert found is page
        assert found.using_slug_backup

        current = Page.find_by_url("/new/")
        assert current is page
        assert not current.using_slug_backup

    def test_cleared_history_stops_matching(self, db, make_page):
        page = make_page("news", slug="old")
        update_page(page_id=page.id, data={"slug": "new"})

        page.slugs_backup = []
        db.session.commit()

        assert Page.find_by_url("/old/") is None

    def test_history_is_a_set_in_order(self, make_page):
        page = make_page("news", slug="old")
        for slug in ("new", "old", "new"):
            update_page(page_id=page.id, data={"slug": slug})

        assert page.slugs_backup == ["old", "new"]
        assert page.slugs_backup_text == "old\nnew\n"

    def test_history_only_matches_whole_lines(self, make_page):
        page = make_page("news", slug="old-news")
        update_page(page_id=page.id, data={"slug": "news"})

        assert Page.find_by_url("/old/") is None
        assert Page.find_by_url("/news-/") is None
        assert Page.find_by_url("/old-news/") is page

    def test_history_is_scoped_to_path(self, make_page):
        page = make_page("team", slug="crew", path="/about/")
        update_page(page_id=page.id, data={"slug": "team"})

        assert Page.find_by_url("/crew/") is None
        assert Page.find_by_url("/about/crew/") is page


class TestSeo:

    def test_child_inherits_root_seo(self, make_page):
        make_page("home", slug="home", seo={"title": "Home"})
        child = make_page("about", slug="about", seo={})

        assert child.seo == {"title": "Home"}

    def test_child_overrides_root_seo(self, make_page):
        make_page("home", slug="home", seo={"title": "Home", "description": "Site"})
        child = make_page("about", slug="about", seo={"title": "Child"})

        assert child.seo == {"title": "Child", "description": "Site"}

    def test_nested_inheritance(self, make_page):
        make_page("home", slug="home", seo={"title": "Home"})
        make_page("about", slug="about", seo={"description": "About us"})
        team = make_page("team", slug="team", path="/about/", seo={"keywords": "people"})

        assert team.seo == {"title": "Home", "description": "About us", "keywords": "people"}

    def test_assignment_clears_memo(self, make_page):
        page = make_page("home", slug="home", seo={"title": "Home"})
        assert page.seo == {"title": "Home"}

        page.seo = {"title": "Welcome"}
        assert page.seo == {"title": "Welcome"}


class TestRelations:

    def test_parent_children_siblings(self, make_page):
        about = make_page("about", slug="about")
        contact = make_page("contact", slug="contact")
        team = make_page("team", slug="team", path="/about/")
        jobs = make_page("jobs", slug="jobs", path="/about/")

        assert team.parent is about
        assert about.parent is None
        assert about.children() == [team, jobs]
        assert team.siblings() == [jobs]
        assert about.siblings() == [contact]
        assert team.parent_url == "/about/"
        assert about.parent_url == "/"

    def test_parent_url_options(self, make_page):
        about = make_page("about", slug="about")
        team = make_page("team", slug="team", path="/about/")

        assert about.parent_url_options() == ["/", "/about/team/"]
        assert team.parent_url_options() == ["/", "/about/"]

    def test_reparenting_moves_rank_scope(self, make_page):
        about = make_page("about", slug="about")
        contact = make_page("contact", slug="contact")
        careers = make_page("careers", slug="careers")
        make_page("team", slug="team", path="/about/")

        update_page(page_id=contact.id, data={"parent_identifier": "about"})

        assert contact.url == "/about/contact/"
        assert contact.position == 2
        assert (about.position, careers.position) == (1, 2)


class TestResolve:

    @pytest.fixture
    def page(self, make_page):
        return make_page("home", slug="home", parts=[
            {
                "identifier": "intro",
                "fields": [
                    {"identifier": "title", "type": "string", "value": "Welcome"},
                    {"identifier": "visitors", "type": "integer", "value": "42"},
                ],
            },
            {
                "identifier": "slideshow",
                "repeatable": True,
                "subparts": [
                    {"fields": [{"identifier": "caption", "type": "string", "value": "First"}]},
                ],
            },
        ])

    def test_part_and_field(self, page):
        assert page.resolve("intro").identifier == "intro"
        assert page.resolve("intro.title") == "Welcome"
        assert page.resolve("intro.visitors") == 42

    def test_repeatable_returns_all_parts(self, page):
        parts = page.resolve("slideshow")
        assert [p.identifier for p in parts] == ["slideshow"]
        assert parts[0].subparts[0].resolve("caption") == "First"

    def test_longer_path_on_repeatable_is_ambiguous(self, page):
        with pytest.raises(AmbiguousPathError):
            page.resolve("slideshow.caption")

    def test_missing_part_or_field(self, page):
        assert page.resolve("footer") is None
        assert page.resolve("footer.text") is None
        assert page.resolve("intro.unknown") is None


class TestUpdateAndDelete:

    def test_no_op_update_fails(self, make_page):
        page = make_page("about", slug="about")
        with pytest.raises(InvariantViolation):
            update_page(page_id=page.id, data={"slug": "about"})

    def test_nested_update_and_destroy(self, make_page):
        page = make_page("about", slug="about", parts=[
            {"identifier": "intro", "fields": [{"identifier": "title", "type": "string", "value": "Hi"}]},
            {"identifier": "footer", "fields": [{"identifier": "note", "type": "string", "value": "Bye"}]},
        ])
        intro, footer = page.parts
        title = intro.fields[0]

        update_page(page_id=page.id, data={"parts": [
            {"id": intro.id, "fields": [{"id": title.id, "value": "Hello"}]},
            {"id": footer.id, "_destroy": "1"},
        ]})

        assert [p.identifier for p in page.parts] == ["intro"]
        assert page.resolve("intro.title") == "Hello"
        assert Field.query.count() == 1

    def test_failed_nested_update_writes_nothing(self, make_page):
        page = make_page("about", slug="about", parts=[
            {"identifier": "intro", "fields": [{"identifier": "count", "type": "integer", "value": "1"}]},
        ])
        intro = page.parts[0]

        with pytest.raises(ValidationError):
            update_page(page_id=page.id, data={
                "title": "Renamed",
                "parts": [{"id": intro.id, "fields": [{"id": intro.fields[0].id, "value": "many"}]}],
            })

        assert page.title == "about"
        assert page.resolve("intro.count") == 1

    def test_rejected_attributes_do_not_leak_into_next_save(self, make_page):
        alpha = make_page("alpha", slug="alpha")
        beta = make_page("beta", slug="beta")

        with pytest.raises(ValidationError):
            update_page(page_id=alpha.id, data={
                "title": "Changed",
                "parts": [{"identifier": "intro", "fields": [{"identifier": "x", "type": "bogus"}]}],
            })
        with pytest.raises(InvariantViolation):
            update_page(page_id=alpha.id, data={"title": "Changed", "parts": [{"id": "not-mine"}]})

        update_page(page_id=beta.id, data={"title": "Beta 2"})

        assert alpha.title == "alpha"
        assert alpha.parts == []
        assert beta.title == "Beta 2"
        assert Page.query.filter_by(title="Changed").count() == 0

    def test_delete_cascades_and_compacts(self, make_page):
        home = make_page("home", slug="home")
        about = make_page("about", slug="about", parts=[
            {
                "identifier": "slideshow",
                "repeatable": True,
                "subparts": [{"fields": [{"identifier": "caption", "type": "string", "value": "x"}]}],
            },
        ])
        contact = make_page("contact", slug="contact")

        delete_page(page_id=about.id)

        assert PagePart.query.count() == 0
        assert Field.query.count() == 0
        assert (home.position, contact.position) == (1, 2)


def test_fields_schema(template):
    from folio.models import fields_schema

    assert fields_schema(template.id)["slideshow"]["repeatable"] is True
    assert fields_schema(None) == {}
    assert fields_schema("missing") == {}
