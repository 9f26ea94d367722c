from articles.models import ArticleRecord, ArticleSource, ArticleRunSummary
from articles.storage import ArticleStore
from articles.engine import ArticlePipeline
from articles.sources import NAVER, CNN, SOURCES, get_source
