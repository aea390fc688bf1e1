"""
Content State
=============

Immutable snapshot of projects and articles, pure reducers over it, and
the store that runs one database or generator round trip per action
before applying a reducer.
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, Optional

from loguru import logger

from ..config import DEFAULT_PROJECT_COLOR
from ..database import SessionFactory, get_db_session, utcnow
from ..models import Article, ArticleStatus, Project, ActivityType, log_activity
from ..schemas import ArticleRecord, ContentGenerationRequest, ProjectRecord, SessionUser
from ..services.gemini import GeminiClient
from ..services.scoring import score_content
from ..utils.text import make_excerpt, slugify


PROJECT_FIELDS = {
    "name", "description", "color", "industry", "target_audience", "brand_voice",
    "primary_keywords", "competitor_urls", "is_archived",
}
ARTICLE_FIELDS = {
    "title", "slug", "meta_description", "content", "excerpt", "target_keywords",
    "internal_links", "word_count", "seo_score", "readability_score", "keyword_density",
    "schema_markup", "status", "published_at",
}


@dataclass(frozen=True)
class ContentState:
    projects: tuple[ProjectRecord, ...] = ()
    articles: tuple[ArticleRecord, ...] = ()
    current_project: Optional[ProjectRecord] = None
    current_article: Optional[ArticleRecord] = None
    loading: bool = False


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def set_loading(state: ContentState, loading: bool) -> ContentState:
    return replace(state, loading=loading)


def projects_loaded(state: ContentState, projects) -> ContentState:
    return replace(state, projects=tuple(projects))


def project_created(state: ContentState, project: ProjectRecord) -> ContentState:
    return replace(state, projects=(project,) + state.projects)


def project_updated(state: ContentState, project: ProjectRecord) -> ContentState:
    current = state.current_project
    return replace(
        state,
        projects=tuple(project if p.id == project.id else p for p in state.projects),
        current_project=project if current is not None and current.id == project.id else current,
    )


def project_deleted(state: ContentState, project_id: str) -> ContentState:
    """Drop the project and its articles; clear selections that pointed at them."""
    current_project = state.current_project
    current_article = state.current_article
    if current_project is not None and current_project.id == project_id:
        current_project = None
    if current_article is not None and current_article.project_id == project_id:
        current_article = None

    return replace(
        state,
        projects=tuple(p for p in state.projects if p.id != project_id),
        articles=tuple(a for a in state.articles if a.project_id != project_id),
        current_project=current_project,
        current_article=current_article,
    )


def articles_loaded(state: ContentState, articles) -> ContentState:
    return replace(state, articles=tuple(articles))


def article_created(state: ContentState, article: ArticleRecord) -> ContentState:
    return replace(state, articles=(article,) + state.articles)


def article_updated(state: ContentState, article: ArticleRecord) -> ContentState:
    current = state.current_article
    return replace(
        state,
        articles=tuple(article if a.id == article.id else a for a in state.articles),
        current_article=article if current is not None and current.id == article.id else current,
    )


def article_deleted(state: ContentState, article_id: str) -> ContentState:
    current = state.current_article
    return replace(
        state,
        articles=tuple(a for a in state.articles if a.id != article_id),
        current_article=None if current is not None and current.id == article_id else current,
    )


def current_project_set(state: ContentState, project: Optional[ProjectRecord]) -> ContentState:
    return replace(state, current_project=project)


def current_article_set(state: ContentState, article: Optional[ArticleRecord]) -> ContentState:
    return replace(state, current_article=article)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def _check_fields(updates: dict, allowed: set, kind: str):
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Unknown {kind} fields: {', '.join(sorted(unknown))}")


def _apply_scores(article: Article, seo_override: Optional[float] = None):
    """Refresh heuristic scores from the article's content and keywords."""
    score = score_content(article.content or "", article.target_keywords or [])
    article.word_count = score.word_count
    article.readability_score = score.readability_score
    article.keyword_density = score.keyword_density
    article.seo_score = score.seo_score if seo_override is None else seo_override


class ContentStore:
    """
    Projects and articles for the signed-in user.

    Every action either completes and replaces ``state`` with the
    reducer's result, or raises and leaves ``state`` as it was apart from
    the loading flag.
    """

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        generator: Optional[GeminiClient] = None,
        user: Optional[SessionUser] = None
    ):
        self.session_factory = session_factory
        self._generator = generator
        self.user = user
        self.state = ContentState()

    @property
    def generator(self) -> GeminiClient:
        if self._generator is None:
            self._generator = GeminiClient()
        return self._generator

    def _require_user(self) -> SessionUser:
        if self.user is None:
            raise PermissionError("User not authenticated")
        return self.user

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self.state = set_loading(self.state, True)
        try:
            yield
        finally:
            self.state = set_loading(self.state, False)

    @staticmethod
    def _get(session, model, row_id: str):
        row = session.get(model, row_id)
        if row is None:
            raise LookupError(f"{model.__name__} {row_id} not found")
        return row

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def load_projects(self) -> list[ProjectRecord]:
        """Load the user's projects, newest first."""
        user = self._require_user()
        with self._loading():
            with get_db_session(self.session_factory) as session:
                rows = (
                    session.query(Project)
                    .filter(Project.user_id == user.id)
                    .order_by(Project.created_at.desc())
                    .all()
                )
                projects = [ProjectRecord.model_validate(p) for p in rows]

        self.state = projects_loaded(self.state, projects)
        logger.debug("Loaded {} projects", len(projects))
        return projects

    def create_project(
        self,
        name: str,
        description: Optional[str] = None,
        color: str = DEFAULT_PROJECT_COLOR,
        **fields
    ) -> ProjectRecord:
        user = self._require_user()
        _check_fields(fields, PROJECT_FIELDS, "project")

        with get_db_session(self.session_factory) as session:
            project = Project(user_id=user.id, name=name, description=description, color=color, **fields)
            session.add(project)
            session.flush()
            log_activity(
                session, project.id, ActivityType.PROJECT_CREATED,
                f"Created project \"{name}\"",
                user_id=user.id,
            )
            record = ProjectRecord.model_validate(project)

        self.state = project_created(self.state, record)
        logger.info("Created project {} ({})", record.name, record.id)
        return record

    def update_project(self, project_id: str, **updates) -> ProjectRecord:
        _check_fields(updates, PROJECT_FIELDS, "project")

        with get_db_session(self.session_factory) as session:
            project = self._get(session, Project, project_id)
            for key, value in updates.items():
                setattr(project, key, value)
            project.updated_at = utcnow()
            session.flush()
            record = ProjectRecord.model_validate(project)

        self.state = project_updated(self.state, record)
        return record

    def delete_project(self, project_id: str):
        """Delete a project along with its articles, members and workflow."""
        with get_db_session(self.session_factory) as session:
            session.delete(self._get(session, Project, project_id))

        self.state = project_deleted(self.state, project_id)
        logger.info("Deleted project {}", project_id)

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    def load_articles(self, project_id: Optional[str] = None) -> list[ArticleRecord]:
        """Load articles of one project, or all of the user's articles, newest first."""
        with self._loading():
            with get_db_session(self.session_factory) as session:
                query = session.query(Article)
                if project_id:
                    query = query.filter(Article.project_id == project_id)
                else:
                    query = query.filter(Article.user_id == self._require_user().id)
                rows = query.order_by(Article.created_at.desc()).all()
                articles = [ArticleRecord.model_validate(a) for a in rows]

        self.state = articles_loaded(self.state, articles)
        logger.debug("Loaded {} articles", len(articles))
        return articles

    def get_article(self, article_id: str) -> ArticleRecord:
        with get_db_session(self.session_factory) as session:
            return ArticleRecord.model_validate(self._get(session, Article, article_id))

    def create_article(self, project_id: str, title: str, content: str = "", **fields) -> ArticleRecord:
        """
        Create an article scored by the content heuristic.

        An explicit ``seo_score`` is kept; the other scores are always
        computed from the content.
        """
        return self._create_article(project_id, title, content, ActivityType.ARTICLE_CREATED, "Created", fields)

    def _create_article(self, project_id, title, content, activity_type, verb, fields) -> ArticleRecord:
        user = self._require_user()
        _check_fields(fields, ARTICLE_FIELDS, "article")
        if "status" in fields:
            fields["status"] = ArticleStatus(fields["status"])
        seo_override = fields.pop("seo_score", None)
        for computed in ("word_count", "readability_score", "keyword_density"):
            fields.pop(computed, None)

        with get_db_session(self.session_factory) as session:
            project = self._get(session, Project, project_id)

            article = Article(
                project_id=project_id,
                user_id=user.id,
                title=title,
                content=content,
                slug=fields.pop("slug", None) or slugify(title),
                excerpt=fields.pop("excerpt", None) or make_excerpt(content),
                **fields,
            )
            _apply_scores(article, seo_override)
            session.add(article)
            project.article_count = (project.article_count or 0) + 1
            session.flush()

            log_activity(
                session, project_id, activity_type,
                f"{verb} article \"{title}\"",
                user_id=user.id,
                details={"article_id": article.id},
            )
            record = ArticleRecord.model_validate(article)

        self.state = article_created(self.state, record)
        logger.info("Created article {} (SEO score {})", record.id, record.seo_score)
        return record

    def update_article(self, article_id: str, **updates) -> ArticleRecord:
        """
        Update article fields and stamp ``updated_at``.

        Changing content or keywords refreshes the heuristic scores; a
        ``seo_score`` passed alongside takes precedence.
        """
        return self._update_article(article_id, ActivityType.ARTICLE_UPDATED, "Updated", updates)

    def _update_article(self, article_id, activity_type, verb, updates) -> ArticleRecord:
        _check_fields(updates, ARTICLE_FIELDS, "article")
        if "status" in updates:
            updates["status"] = ArticleStatus(updates["status"])

        with get_db_session(self.session_factory) as session:
            article = self._get(session, Article, article_id)
            for key, value in updates.items():
                setattr(article, key, value)

            if "content" in updates or "target_keywords" in updates:
                _apply_scores(article, updates.get("seo_score"))
                if "content" in updates:
                    article.version = (article.version or 1) + 1
            if updates.get("status") == ArticleStatus.PUBLISHED and article.published_at is None:
                article.published_at = utcnow()

            article.updated_at = utcnow()
            log_activity(
                session, article.project_id, activity_type,
                f"{verb} article \"{article.title}\"",
                user_id=self.user.id if self.user else None,
                details={"article_id": article_id, "fields": sorted(updates)},
            )
            session.flush()
            record = ArticleRecord.model_validate(article)

        self.state = article_updated(self.state, record)
        return record

    def delete_article(self, article_id: str):
        with get_db_session(self.session_factory) as session:
            article = self._get(session, Article, article_id)
            project = article.project
            project.article_count = max(0, (project.article_count or 0) - 1)
            log_activity(
                session, project.id, ActivityType.ARTICLE_DELETED,
                f"Deleted article \"{article.title}\"",
                user_id=self.user.id if self.user else None,
            )
            session.delete(article)

        self.state = article_deleted(self.state, article_id)
        logger.info("Deleted article {}", article_id)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_article(
        self,
        project_id: str,
        request: ContentGenerationRequest,
        advanced: bool = False
    ) -> ArticleRecord:
        """
        Generate an article and store it as ready.

        The stored SEO score comes from the content heuristic, not from
        the score the model reports about its own output.
        """
        self._require_user()

        with self._loading():
            if advanced:
                generated = self.generator.generate_advanced_content(request)
            else:
                generated = self.generator.generate_content(request)

            if generated.degraded:
                logger.warning("Storing degraded generation result for '{}'", request.topic)

            record = self._create_article(
                project_id, generated.title, generated.content,
                ActivityType.ARTICLE_GENERATED, "Generated",
                dict(
                    meta_description=generated.meta_description,
                    target_keywords=generated.keywords or list(request.target_keywords),
                    internal_links=generated.internal_links,
                    schema_markup=generated.schema_markup,
                    status=ArticleStatus.READY,
                ),
            )

        return record

    def optimize_article(self, article_id: str) -> ArticleRecord:
        """
        Ask the generator for an SEO analysis and mark the article ready.

        Falls back to the heuristic score when the analysis could not be
        parsed.
        """
        article = next((a for a in self.state.articles if a.id == article_id), None)
        if article is None:
            article = self.get_article(article_id)

        with self._loading():
            analysis = self.generator.optimize_content(article.content, list(article.target_keywords))
            if analysis.error:
                seo = score_content(article.content, article.target_keywords).seo_score
                logger.warning("Optimization analysis unavailable ({}); using heuristic score {}", analysis.error, seo)
            else:
                seo = max(0.0, min(100.0, analysis.seo_score))

            record = self._update_article(
                article_id, ActivityType.ARTICLE_OPTIMIZED, "Optimized",
                {"seo_score": seo, "status": ArticleStatus.READY},
            )

        logger.info("Optimized article {} (SEO score {})", article_id, record.seo_score)
        return record

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_project(self, project: Optional[ProjectRecord]):
        self.state = current_project_set(self.state, project)

    def select_article(self, article: Optional[ArticleRecord]):
        self.state = current_article_set(self.state, article)
