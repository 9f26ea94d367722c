from summarize.models import SummaryResult
from summarize.client import SummarizeClient, SummarizeService
