from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConduitModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- User ---

class NewUser(ConduitModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=1)
    username: str = Field(min_length=1, max_length=255)


class LoginUser(ConduitModel):
    email: str
    password: str


class UpdateUser(ConduitModel):
    bio: str | None = None
    email: str | None = Field(None, max_length=255)
    image: str | None = None
    password: str | None = Field(None, min_length=1)
    username: str | None = Field(None, min_length=1, max_length=255)


class UserResponse(ConduitModel):
    bio: str | None
    email: str
    image: str | None
    token: str | None
    username: str


class NewUserRequest(BaseModel):
    user: NewUser


class LoginRequest(BaseModel):
    user: LoginUser


class UpdateUserRequest(BaseModel):
    user: UpdateUser


class UserEnvelope(BaseModel):
    user: UserResponse


# --- Profile ---

class Profile(ConduitModel):
    bio: str | None
    image: str | None
    username: str
    following: bool = False


class ProfileEnvelope(BaseModel):
    profile: Profile


# --- Article ---

class NewArticle(ConduitModel):
    title: str = Field(min_length=1)
    description: str | None = None
    body: str | None = None
    tag_list: list[str] = []


class UpdateArticle(ConduitModel):
    body: str | None = None


class Article(ConduitModel):
    slug: str
    title: str
    description: str | None
    body: str | None
    tag_list: list[str] = []
    created_at: str
    updated_at: str
    favorited: bool = False
    favorites_count: int = 0
    author: str


class NewArticleRequest(BaseModel):
    article: NewArticle


class UpdateArticleRequest(BaseModel):
    article: UpdateArticle


class ArticleEnvelope(BaseModel):
    article: Article


class ArticleList(ConduitModel):
    articles: list[Article]
    articles_count: int


# --- Comment ---

class NewComment(ConduitModel):
    body: str = Field(min_length=1)


class Comment(ConduitModel):
    id: int
    body: str
    created_at: str
    updated_at: str
    author: Profile


class NewCommentRequest(BaseModel):
    comment: NewComment


class CommentEnvelope(BaseModel):
    comment: Comment


class CommentList(BaseModel):
    comments: list[Comment]


# --- Tags ---

class TagList(BaseModel):
    tags: list[str]
