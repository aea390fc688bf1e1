"""Tests for content state reducers and the content store."""

from unittest.mock import MagicMock

import pytest

from adihunt.database import get_db_session
from adihunt.models import ActivityType, Article, ArticleStatus, Project, ProjectActivity
from adihunt.schemas import (
    ArticleRecord, ContentGenerationRequest, ContentOptimization, GeneratedContent, ProjectRecord,
)
from adihunt.services.gemini import GeminiClient, GenerationError
from adihunt.state.content import (
    ContentState,
    ContentStore,
    article_created,
    article_deleted,
    article_updated,
    project_created,
    project_deleted,
    project_updated,
    current_article_set,
    current_project_set,
)


def make_project(project_id="p1", name="Project"):
    return ProjectRecord(id=project_id, user_id="u1", name=name)


def make_article(article_id="a1", project_id="p1", title="Article"):
    return ArticleRecord(id=article_id, project_id=project_id, user_id="u1", title=title)


class TestReducers:
    """Reducers return new state and never touch their input."""

    def test_project_created_prepends(self):
        state = ContentState(projects=(make_project("old"),))
        new_state = project_created(state, make_project("new"))

        assert [p.id for p in new_state.projects] == ["new", "old"]
        assert [p.id for p in state.projects] == ["old"]

    def test_project_updated_maps_by_id(self):
        original = make_project("p1", "Before")
        state = ContentState(projects=(original, make_project("p2")), current_project=original)

        new_state = project_updated(state, make_project("p1", "After"))

        assert [p.name for p in new_state.projects] == ["After", "Project"]
        assert new_state.current_project.name == "After"
        assert state.projects[0].name == "Before"
        assert state.current_project.name == "Before"

    def test_project_deleted_clears_selection_and_articles(self):
        project = make_project("p1")
        article = make_article("a1", "p1")
        other = make_article("a2", "p2")
        state = ContentState(
            projects=(project, make_project("p2")),
            articles=(article, other),
            current_project=project,
            current_article=article,
        )

        new_state = project_deleted(state, "p1")

        assert [p.id for p in new_state.projects] == ["p2"]
        assert [a.id for a in new_state.articles] == ["a2"]
        assert new_state.current_project is None
        assert new_state.current_article is None
        assert len(state.projects) == 2

    def test_article_updated_refreshes_current(self):
        article = make_article("a1", title="Old")
        state = ContentState(articles=(article,), current_article=article)

        new_state = article_updated(state, make_article("a1", title="New"))

        assert new_state.articles[0].title == "New"
        assert new_state.current_article.title == "New"
        assert state.current_article.title == "Old"

    def test_article_updated_leaves_other_selection(self):
        selected = make_article("a2")
        state = ContentState(articles=(make_article("a1"), selected), current_article=selected)
        new_state = article_updated(state, make_article("a1", title="Changed"))
        assert new_state.current_article is selected

    def test_article_created_and_deleted(self):
        state = article_created(ContentState(), make_article("a1"))
        state = current_article_set(state, state.articles[0])
        assert state.current_article.id == "a1"

        deleted = article_deleted(state, "a1")
        assert deleted.articles == ()
        assert deleted.current_article is None
        assert state.articles[0].id == "a1"

    def test_selection(self):
        project = make_project()
        state = current_project_set(ContentState(), project)
        assert state.current_project is project
        assert current_project_set(state, None).current_project is None


class TestProjects:

    def test_create_project(self, content_store, user):
        record = content_store.create_project("Notary Blog", "About notaries", industry="Legal")

        assert record.user_id == user.id
        assert record.color == "#3b82f6"
        assert record.industry == "Legal"
        assert content_store.state.projects == (record,)

    def test_create_project_logs_activity(self, content_store, session_factory):
        record = content_store.create_project("Notary Blog")
        with get_db_session(session_factory) as session:
            activities = session.query(ProjectActivity).filter(ProjectActivity.project_id == record.id).all()
            assert len(activities) == 1

    def test_create_project_rejects_unknown_fields(self, content_store):
        with pytest.raises(ValueError, match="owner_name"):
            content_store.create_project("Blog", owner_name="x")
        assert content_store.state.projects == ()

    def test_create_requires_user(self, session_factory):
        store = ContentStore(session_factory)
        with pytest.raises(PermissionError):
            store.create_project("Blog")

    def test_load_projects_only_own(self, content_store, session_factory):
        content_store.create_project("Mine")
        with get_db_session(session_factory) as session:
            session.add(Project(user_id="someone-else", name="Theirs"))

        fresh = ContentStore(session_factory, user=content_store.user)
        projects = fresh.load_projects()

        assert [p.name for p in projects] == ["Mine"]
        assert fresh.state.projects == tuple(projects)
        assert fresh.state.loading is False

    def test_update_project(self, content_store, project):
        content_store.select_project(project)

        updated = content_store.update_project(project.id, name="Renamed", primary_keywords=["notary"])

        assert updated.name == "Renamed"
        assert updated.primary_keywords == ["notary"]
        assert content_store.state.projects[0].name == "Renamed"
        assert content_store.state.current_project.name == "Renamed"

    def test_update_missing_project_leaves_state(self, content_store, project):
        before = content_store.state
        with pytest.raises(LookupError):
            content_store.update_project("missing", name="x")
        assert content_store.state == before

    def test_delete_project_cascades(self, content_store, project, article, session_factory):
        content_store.delete_project(project.id)

        assert content_store.state.projects == ()
        assert content_store.state.articles == ()
        with get_db_session(session_factory) as session:
            assert session.query(Article).count() == 0
            assert session.query(ProjectActivity).count() == 0


class TestArticles:

    def test_create_article_scores_content(self, content_store, project, session_factory):
        record = content_store.create_article(
            project.id,
            title="SEO Guide",
            content="<h1>SEO Guide</h1><p>SEO SEO SEO</p>",
            target_keywords=["SEO"],
        )

        assert record.word_count == 5
        assert record.keyword_density == {"SEO": pytest.approx(80.0)}
        assert record.seo_score == 20
        assert record.slug == "seo-guide"
        assert record.excerpt == "SEO Guide SEO SEO SEO"
        assert record.status == ArticleStatus.DRAFT
        assert content_store.state.articles[0] == record

        with get_db_session(session_factory) as session:
            assert session.get(Project, project.id).article_count == 1

    def test_create_article_keeps_explicit_seo_score(self, content_store, project):
        record = content_store.create_article(project.id, title="T", content="<p>x</p>", seo_score=64)
        assert record.seo_score == 64

    def test_create_article_missing_project(self, content_store):
        with pytest.raises(LookupError):
            content_store.create_article("missing", title="T")
        assert content_store.state.articles == ()

    def test_load_articles_by_project(self, content_store, project, article):
        other = content_store.create_project("Other")
        content_store.create_article(other.id, title="Elsewhere")

        articles = content_store.load_articles(project.id)

        assert [a.id for a in articles] == [article.id]

    def test_load_all_user_articles(self, content_store, project, article):
        content_store.create_article(project.id, title="Second")
        assert len(content_store.load_articles()) == 2

    def test_update_article_stamps_and_rescores(self, content_store, article):
        content_store.select_article(article)

        updated = content_store.update_article(
            article.id,
            content="<h1>Apostille</h1><p>apostille " + "word " * 98 + "</p>",
        )

        assert updated.version == 2
        assert updated.word_count == 100
        assert updated.seo_score == 40
        assert article.seo_score == 20
        assert updated.updated_at is not None
        assert content_store.state.current_article == updated

    def test_publish_sets_published_at(self, content_store, article):
        updated = content_store.update_article(article.id, status="published")
        assert updated.status == ArticleStatus.PUBLISHED
        assert updated.published_at is not None

    def test_delete_article(self, content_store, project, article, session_factory):
        content_store.select_article(article)
        content_store.delete_article(article.id)

        assert content_store.state.articles == ()
        assert content_store.state.current_article is None
        with get_db_session(session_factory) as session:
            assert session.get(Article, article.id) is None
            assert session.get(Project, project.id).article_count == 0


class TestGeneration:

    @pytest.fixture
    def generator(self):
        return MagicMock(spec=GeminiClient)

    @pytest.fixture
    def store(self, session_factory, user, auth_store, generator):
        return ContentStore(session_factory, generator=generator, user=user)

    @pytest.fixture
    def gen_request(self):
        return ContentGenerationRequest(topic="Apostilles", target_keywords=["apostille"])

    def test_generate_article(self, store, generator, gen_request):
        project = store.create_project("Blog")
        generator.generate_content.return_value = GeneratedContent(
            title="Apostille Guide",
            meta_description="All about apostilles",
            content="<h1>Apostille Guide</h1><p>An apostille is a certificate.</p>",
            keywords=["apostille"],
            schema_markup={"@type": "Article"},
            seo_score=99,
        )

        record = store.generate_article(project.id, gen_request)

        assert record.status == ArticleStatus.READY
        assert record.title == "Apostille Guide"
        assert record.meta_description == "All about apostilles"
        assert record.schema_markup == {"@type": "Article"}
        # Heuristic score, not the model's self-reported 99
        assert record.seo_score == 20
        assert store.state.articles[0] == record
        assert store.state.loading is False
        generator.generate_advanced_content.assert_not_called()

    def test_generate_advanced(self, store, generator, gen_request):
        project = store.create_project("Blog")
        generator.generate_advanced_content.return_value = GeneratedContent(content="<p>text</p>", degraded=True)

        record = store.generate_article(project.id, gen_request, advanced=True)

        assert record.title == "Generated Content"
        assert record.target_keywords == ["apostille"]

    def test_generation_failure_leaves_state(self, store, generator, gen_request):
        project = store.create_project("Blog")
        before = store.state
        generator.generate_content.side_effect = GenerationError("Gemini API error: 503")

        with pytest.raises(GenerationError):
            store.generate_article(project.id, gen_request)

        assert store.state == before
        assert store.state.loading is False

    def test_optimize_uses_model_score(self, store, generator):
        project = store.create_project("Blog")
        article = store.create_article(project.id, title="Draft", content="<p>draft</p>")
        generator.optimize_content.return_value = ContentOptimization(seo_score=88)

        record = store.optimize_article(article.id)

        assert record.seo_score == 88
        assert record.status == ArticleStatus.READY
        assert store.state.articles[0].seo_score == 88

    def test_optimize_falls_back_to_heuristic(self, store, generator):
        project = store.create_project("Blog")
        article = store.create_article(
            project.id, title="Draft", content='<h1>Apostille</h1><a href="/x">x</a>',
            target_keywords=["apostille"], seo_score=5,
        )
        generator.optimize_content.return_value = ContentOptimization(seo_score=0, error="Failed to analyze content")

        record = store.optimize_article(article.id)

        assert record.seo_score == 30
        assert record.status == ArticleStatus.READY

    def test_optimize_missing_article(self, store, generator):
        with pytest.raises(LookupError):
            store.optimize_article("missing")
        generator.optimize_content.assert_not_called()

    def test_generate_and_optimize_log_their_own_activity(self, store, generator, gen_request, session_factory):
        project = store.create_project("Blog")
        generator.generate_content.return_value = GeneratedContent(title="Apostille Guide", content="<p>text</p>")
        generator.optimize_content.return_value = ContentOptimization(seo_score=70)

        record = store.generate_article(project.id, gen_request)
        store.optimize_article(record.id)

        with get_db_session(session_factory) as session:
            rows = (
                session.query(ProjectActivity)
                .filter(ProjectActivity.project_id == project.id)
                .all()
            )
            types = {row.activity_type for row in rows}
            descriptions = {row.description for row in rows}

        assert ActivityType.ARTICLE_GENERATED in types
        assert ActivityType.ARTICLE_OPTIMIZED in types
        assert ActivityType.ARTICLE_CREATED not in types
        assert ActivityType.ARTICLE_UPDATED not in types
        assert 'Optimized article "Apostille Guide"' in descriptions

    def test_optimize_reads_article_from_state(self, store, generator, monkeypatch):
        project = store.create_project("Blog")
        article = store.create_article(project.id, title="Draft", content="<p>draft</p>")
        generator.optimize_content.return_value = ContentOptimization(seo_score=60)
        get_article = MagicMock(wraps=store.get_article)
        monkeypatch.setattr(store, "get_article", get_article)

        store.optimize_article(article.id)

        get_article.assert_not_called()
        generator.optimize_content.assert_called_once_with("<p>draft</p>", [])

    def test_optimize_loads_article_missing_from_state(self, store, generator, session_factory, user, monkeypatch):
        project = store.create_project("Blog")
        article = store.create_article(project.id, title="Draft", content="<p>draft</p>")
        generator.optimize_content.return_value = ContentOptimization(seo_score=60)
        fresh = ContentStore(session_factory, generator=generator, user=user)
        get_article = MagicMock(wraps=fresh.get_article)
        monkeypatch.setattr(fresh, "get_article", get_article)

        record = fresh.optimize_article(article.id)

        get_article.assert_called_once_with(article.id)
        assert record.seo_score == 60
