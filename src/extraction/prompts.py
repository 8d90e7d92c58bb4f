"""Versioned prompt templates for concept extraction and thread summaries.

Each :class:`PromptTemplates` bundle is a complete prompt contract: the
pipeline selects one by version name instead of duplicating itself per
wording variant.  User templates are ``str.format`` templates with
``{content}`` and, for threads, ``{concept}`` placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass

_CONCEPT_SYSTEM_PROMPT = """\
You are an expert in analyzing group chat conversations to identify the most \
significant and meaningful topics discussed.

STRICT OUTPUT REQUIREMENTS:
- Return ONLY a valid JSON array of strings.
- Format: ["Topic 1", "Topic 2", "Topic 3"]
- Return [] if no significant topics are found.
- No additional text or explanations.
- Each topic must be 2-8 words.
- Extract between 3 and 15 topics.
- Topics must be in Title Case.

ANALYSIS GUIDELINES:
- Recognize topics regardless of the language used.
- Understand informal language, slang, and abbreviations.
- Group related messages into coherent topics.
- Prefer topics that are important, time-sensitive, or require action.
- Ignore spam, automated messages, and irrelevant content.
- Exclude sensitive personal data.

TOPIC TYPES TO LOOK FOR (not exhaustive):
1. Announcements and news: updates, personal milestones, group events.
2. Plans and scheduling: event planning, meeting coordination, deadlines.
3. Questions and assistance: requests for help, advice, problem-solving.
4. Decisions and agreements: consensus, polls or votes, policy updates.
5. Tasks and action items: assignments, responsibilities, next steps.
6. Feedback and opinions: reviews, suggestions, preferences.
7. Social interactions: celebrations, support, jokes.
8. Information sharing: links, articles, educational content.

A GOOD TOPIC:
- involves multiple participants,
- contains real back-and-forth discussion,
- matters to the group or to individuals,
- is worth referring back to later.

INVALID TOPICS: "Chatting", "Just Saying Hi", "Random Thoughts".
VALID TOPICS: "Family Reunion Plans", "Website Launch Date (May 15th)", \
"Technical Issue With App Login", "Alex Farewell Party Planning".
"""

_CONCEPT_USER_TEMPLATE = """\
Extract the key topics from this group chat conversation.
Focus on the discussions that participants most need to know about or that may require action.
Return strictly a JSON array: ["Topic 1", "Topic 2", "Topic 3"].
If no significant topics are found, return: [].

Analyze this chat history:
```
{content}
```"""

_THREAD_OUTPUT_STRUCTURE = """\
{
    "title": "Descriptive title of the topic",
    "language": "Language code (e.g. 'en' for English)",
    "threads": [
        {
            "timestamp": "Approximate date/time range",
            "participants": ["Names or identifiers of active participants"],
            "summary": "A detailed summary of the discussion",
            "attachments": ["Important links or files shared"],
            "unresolved_questions": ["Questions that were not answered"],
            "notes": "Additional important details"
        }
    ],
    "related_topics": ["Other topics connected to this discussion"],
    "follow_ups": [
        {
            "task": "Follow-up action required",
            "assigned_to": "Person responsible",
            "due_date": "Deadline or time frame",
            "status": "Pending|In Progress|Completed"
        }
    ],
    "notes": "Only when the topic was not really discussed: say so here and leave threads empty"
}"""

_THREAD_SYSTEM_PROMPT = (
    """\
You are an expert in summarizing group chat conversations into clear, \
detailed, and actionable summaries.

OUTPUT STRUCTURE:
"""
    + _THREAD_OUTPUT_STRUCTURE
    + """

ANALYSIS GUIDELINES:
- Keep the original context and intent of messages.
- Interpret informal language, slang, and abbreviations.
- Capture emotional tone: humor, excitement, frustration, support.
- Identify decisions, agreements, and outcomes.
- Highlight action items with owners and deadlines.
- Mention important dates, events, and shared links or media.
- Organize information chronologically.
- Distinguish individual opinions from group consensus.
- Note conflicts or disagreements and how they were resolved.
- Exclude sensitive personal information.

A BAD SUMMARY: "The team discussed various options for the project."
A GOOD SUMMARY names who suggested what (with specifics and numbers), how \
others responded, what was decided, and by when. For example: "On March 15th \
at 10:15 Sarah proposed moving the team to Slack, citing GitHub and Jira \
integrations. Pete objected to the $8/user/month price; after comparing \
Discord and Teams the group voted 7-3 for Slack at 11:00 and Tom assigned \
Sarah the migration plan, due Tuesday March 19th."

SUMMARY MUST INCLUDE:
1. Who made each suggestion or decision.
2. What exactly was suggested, with details and numbers.
3. How others responded.
4. The final outcome or next steps.
5. Context that explains why it matters.
6. Timeframes and deadlines.
7. Explanations of acronyms, tools, and places mentioned.

LANGUAGE HANDLING RULES:
1. Detect the primary language of the conversation.
2. Keep all JSON keys in English.
3. Write all content values in the detected language.
4. Status values stay in English: "Pending", "In Progress", "Completed".
5. Use one consistent date format regardless of language.

RESPONSE RULES:
1. Return ONLY the JSON object, with no text outside it.
2. "title" and "threads" are always present.
3. Include only information relevant to the requested topic.
4. If the topic was barely mentioned, return "threads": [] and explain in "notes".
"""
)

_THREAD_USER_TEMPLATE = """\
Summarize the discussions related to "{concept}" from the group chat.
Capture important details, decisions, action items, emotional tone, and unresolved questions.
The summary should be useful to participants who missed the conversation.

Analyze this chat history:
```
{content}
```"""

_BRIEF_THREAD_SYSTEM_PROMPT = (
    """\
You summarize one topic from a group chat. Return ONLY a JSON object with \
this structure:
"""
    + _THREAD_OUTPUT_STRUCTURE
    + """

Rules:
- Keep JSON keys in English; write values in the chat's primary language.
- One or two sentences per summary, naming who said what.
- Include only information relevant to the requested topic.
- If the topic was barely mentioned, return "threads": [] and explain in "notes".
"""
)

_BRIEF_THREAD_USER_TEMPLATE = """\
Summarize the discussion about "{concept}".

Chat history:
```
{content}
```"""


@dataclass(frozen=True)
class PromptPair:
    """A system instruction and the user message that goes with it."""

    system: str
    user: str


@dataclass(frozen=True)
class PromptTemplates:
    """One version of the prompt contract."""

    version: str
    concept_system: str
    concept_user: str
    thread_system: str
    thread_user: str

    def concept_prompts(self, content: str) -> PromptPair:
        return PromptPair(self.concept_system, self.concept_user.format(content=content))

    def thread_prompts(self, content: str, concept: str) -> PromptPair:
        return PromptPair(
            self.thread_system,
            self.thread_user.format(content=content, concept=concept),
        )


PROMPT_VERSIONS: dict[str, PromptTemplates] = {
    "v1": PromptTemplates(
        version="v1",
        concept_system=_CONCEPT_SYSTEM_PROMPT,
        concept_user=_CONCEPT_USER_TEMPLATE,
        thread_system=_THREAD_SYSTEM_PROMPT,
        thread_user=_THREAD_USER_TEMPLATE,
    ),
    "brief": PromptTemplates(
        version="brief",
        concept_system=_CONCEPT_SYSTEM_PROMPT,
        concept_user=_CONCEPT_USER_TEMPLATE,
        thread_system=_BRIEF_THREAD_SYSTEM_PROMPT,
        thread_user=_BRIEF_THREAD_USER_TEMPLATE,
    ),
}

DEFAULT_PROMPT_VERSION = "v1"


def get_prompt_templates(version: str = DEFAULT_PROMPT_VERSION) -> PromptTemplates:
    """Return the prompt bundle registered under *version*.

    Raises:
        ValueError: If *version* is unknown.
    """
    try:
        return PROMPT_VERSIONS[version]
    except KeyError:
        msg = f"Unknown prompt version: {version!r}. Supported: {list(PROMPT_VERSIONS)}"
        raise ValueError(msg) from None
