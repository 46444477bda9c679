from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum, JSON, Boolean, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime
from enum import Enum as PyEnum

Base = declarative_base()


def _enum_column(enum_cls, name: str, **kwargs):
    """Enum column stored by value (e.g. 'under_review', not 'UNDER_REVIEW')."""
    return Column(
        Enum(enum_cls, values_callable=lambda x: [e.value for e in x], name=name),
        **kwargs
    )


# Enums
class AppRole(str, PyEnum):
    """
    Roles a user can hold. A user may hold several at once.

    - ADMIN: full access to the admin console
    - REVIEWER: can see and complete assigned reviews
    - the remaining roles are informational labels shown on profiles
    """
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"
    REVIEWER = "reviewer"
    DOCTOR = "doctor"
    EDITOR = "editor"
    MEMBER = "member"


class AccountStatus(str, PyEnum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    SUSPENDED = "suspended"


class Specialty(str, PyEnum):
    PLASTIC_SURGERY = "Plastic Surgery"
    RECONSTRUCTIVE_SURGERY = "Reconstructive Surgery"
    BURNS = "Burns"
    GENERAL_SURGERY = "General Surgery"
    OTHER = "Other"


class SubmissionStatus(str, PyEnum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    REVISION_REQUESTED = "revision_requested"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ReviewStatus(str, PyEnum):
    """Status of a single reviewer assignment"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DECLINED = "declined"


class Recommendation(str, PyEnum):
    ACCEPT = "accept"
    MINOR_REVISIONS = "minor_revisions"
    MAJOR_REVISIONS = "major_revisions"
    REJECT = "reject"


class ApplicationStatus(str, PyEnum):
    """Status of a reviewer application"""
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class BoardMemberRole(str, PyEnum):
    EDITOR_IN_CHIEF = "editor_in_chief"
    ASSOCIATE_EDITOR = "associate_editor"
    BOARD_MEMBER = "board_member"
    INTERNATIONAL_ADVISOR = "international_advisor"


def default_notification_preferences() -> dict:
    return {
        "email_submissions": True,
        "email_reviews": True,
        "email_publications": True,
    }


# === USERS & PROFILES ===

class User(Base):
    """User authentication record"""
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    roles = relationship("UserRoleAssignment", back_populates="user", cascade="all, delete-orphan", lazy="selectin")

    @property
    def role_names(self) -> list:
        return sorted(r.role.value for r in self.roles)

    def has_role(self, role: AppRole) -> bool:
        return any(r.role == role for r in self.roles)


class UserRoleAssignment(Base):
    """One (user, role) grant"""
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    role = _enum_column(AppRole, "approle", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="roles")


class Profile(Base):
    """Personal profile, created at signup and edited by its owner"""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    username = Column(String(100), nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    id_number = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    account_status = _enum_column(AccountStatus, "accountstatus", default=AccountStatus.UNVERIFIED, nullable=False)
    notification_preferences = Column(JSON, nullable=True, default=default_notification_preferences)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class DoctorProfile(Base):
    """Professional profile; public when is_public_profile is set"""
    __tablename__ = "doctor_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    specialty = _enum_column(Specialty, "specialty", nullable=True)
    academic_degree = Column(String(255), nullable=True)
    university = Column(String(255), nullable=True)
    hospital = Column(String(255), nullable=True)
    years_of_experience = Column(Integer, nullable=True)
    medical_license_number = Column(String(100), nullable=True)
    research_interests = Column(JSON, nullable=True)  # list of strings
    spoken_languages = Column(JSON, nullable=True)  # list of strings
    is_public_profile = Column(Boolean, default=False)
    orcid_id = Column(String(50), nullable=True)
    google_scholar_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class LoginActivity(Base):
    """One successful login"""
    __tablename__ = "login_activity"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    login_at = Column(DateTime, default=datetime.utcnow, index=True)


# === ARTICLES & READER ENGAGEMENT ===

class Article(Base):
    """Published (or draft) journal article. Publication = published_at timestamp."""
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    abstract = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    authors = Column(String(1000), nullable=True)
    category = Column(String(255), nullable=True, index=True)
    image_url = Column(String(1024), nullable=True)
    is_featured = Column(Boolean, default=False)
    is_main_featured = Column(Boolean, default=False)
    volume = Column(String(20), nullable=True)
    issue = Column(String(20), nullable=True)
    doi = Column(String(255), nullable=True)
    review_status = Column(String(50), nullable=True)
    published_at = Column(DateTime, nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ArticleComment(Base):
    __tablename__ = "article_comments"

    id = Column(Integer, primary_key=True, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ArticleLike(Base):
    __tablename__ = "article_likes"
    __table_args__ = (UniqueConstraint("article_id", "user_id", name="uq_article_likes_article_user"),)

    id = Column(Integer, primary_key=True, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class SavedArticle(Base):
    """Bookmark; article title/authors/image are denormalized at save time"""
    __tablename__ = "saved_articles"
    __table_args__ = (UniqueConstraint("user_id", "article_id", name="uq_saved_articles_user_article"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    article_title = Column(String(500), nullable=False)
    article_authors = Column(String(1000), nullable=True)
    article_image = Column(String(1024), nullable=True)
    saved_at = Column(DateTime, default=datetime.utcnow, index=True)


class ReadingHistory(Base):
    """Last read of an article per user; upserted on every read"""
    __tablename__ = "reading_history"
    __table_args__ = (UniqueConstraint("user_id", "article_id", name="uq_reading_history_user_article"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False)
    article_title = Column(String(500), nullable=False)
    article_authors = Column(String(1000), nullable=True)
    article_image = Column(String(1024), nullable=True)
    read_at = Column(DateTime, default=datetime.utcnow, index=True)
    read_duration_seconds = Column(Integer, nullable=True)


# === SUBMISSIONS & PEER REVIEW ===

class Submission(Base):
    """Author manuscript submission"""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    abstract = Column(Text, nullable=False)
    authors = Column(String(1000), nullable=False)
    keywords = Column(String(1000), nullable=True)
    category = Column(String(255), nullable=True)
    cover_letter = Column(Text, nullable=True)
    manuscript_url = Column(String(1024), nullable=True)  # storage path in the manuscripts bucket
    supplementary_url = Column(String(1024), nullable=True)
    status = _enum_column(SubmissionStatus, "submissionstatus", default=SubmissionStatus.PENDING, nullable=False, index=True)
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class _ReviewColumns:
    """Columns shared by article and submission reviews"""
    id = Column(Integer, primary_key=True, index=True)
    status = _enum_column(ReviewStatus, "reviewstatus", default=ReviewStatus.PENDING, nullable=False)
    recommendation = _enum_column(Recommendation, "recommendation", nullable=True)
    feedback = Column(Text, nullable=True)
    private_notes = Column(Text, nullable=True)
    assigned_at = Column(DateTime, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ArticleReview(_ReviewColumns, Base):
    __tablename__ = "article_reviews"
    __table_args__ = (UniqueConstraint("article_id", "reviewer_id", name="uq_article_reviews_article_reviewer"),)

    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)


class SubmissionReview(_ReviewColumns, Base):
    __tablename__ = "submission_reviews"
    __table_args__ = (UniqueConstraint("submission_id", "reviewer_id", name="uq_submission_reviews_submission_reviewer"),)

    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)


class ReviewerApplication(Base):
    """Application to join the reviewer pool; may be submitted anonymously"""
    __tablename__ = "reviewer_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    institution = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    academic_title = Column(String(100), nullable=False)
    orcid_id = Column(String(50), nullable=True)
    google_scholar_id = Column(String(100), nullable=True)
    publications_count = Column(Integer, default=0)
    expertise_areas = Column(JSON, nullable=False, default=list)
    previous_review_experience = Column(Text, nullable=True)
    motivation = Column(Text, nullable=True)
    agreed_to_guidelines = Column(Boolean, default=False, nullable=False)
    agreed_to_confidentiality = Column(Boolean, default=False, nullable=False)
    status = _enum_column(ApplicationStatus, "applicationstatus", default=ApplicationStatus.PENDING, nullable=False, index=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# === EDITORIAL BOARD ===

class EditorialBoardMember(Base):
    __tablename__ = "editorial_board_members"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    role = _enum_column(BoardMemberRole, "boardmemberrole", nullable=False)
    title = Column(String(255), nullable=True)
    affiliation = Column(String(255), nullable=True)
    specialty = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    orcid_id = Column(String(50), nullable=True)
    photo_url = Column(String(1024), nullable=True)
    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
