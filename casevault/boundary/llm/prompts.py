"""
Prompt templates for search summaries and case analysis.
"""

SEARCH_OVERVIEW_PROMPT = """You are a legal discovery analyst. Based on a search for "{query}" in the case "{case_name}", analyze these findings:

Documents with relevant results: {source_names}

Top excerpts found:
{excerpts}

Provide a concise 2-3 sentence summary that:
1. Identifies which documents contain relevant information
2. Explains the context and significance of these findings
3. Notes any patterns or implications for the case

Be specific and professional. Focus on what these findings reveal about the discovery."""

CHUNK_RELEVANCE_PROMPT = """Summarize in 1-2 sentences the relevance of the chunk in relation to the query. Remain technical and do not use filler phrases.

Query: "{query}"

Chunk from "{source_name}":
"{chunk_text}\""""

CASE_ANALYSIS_SYSTEM_PROMPT = """You are a legal document analyst. Analyze the provided discovery documents and generate:
1. A list of 3-6 concise tags that categorize the discovery (e.g., "Contract Dispute", "Employment", "Personal Injury", "Medical Records", "Deposition", "Financial Records")
2. A brief summary (3-4 sentences) of what can be gleaned about the case from these documents, using clear, precise legal language.

Respond in JSON format:
{
  "tags": ["tag1", "tag2", "tag3"],
  "summary": "Your 3-4 sentence summary here."
}

Focus on:
- Type of legal matter
- Key parties involved (if identifiable)
- Nature of claims or issues
- Types of evidence present"""

CASE_ANALYSIS_USER_PROMPT = """Discovery: "{case_name}"
{description_line}Total documents: {document_count}
Document names: {document_names}

Sample content from documents:
{samples}"""
