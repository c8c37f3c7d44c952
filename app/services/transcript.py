import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import settings
from app.core.constants import TRANSCRIPT_FALLBACK

logger = logging.getLogger(__name__)


@dataclass
class TranscriptResult:
    success: bool
    transcript: str


class TranscriptGenerator:
    """Best-effort descriptive text for a lesson video.

    When TRANSCRIPT_SERVICE_URL is configured the video locator and duration are
    posted to that service; otherwise a draft transcript sized to the video
    duration is produced for the creator to edit.
    """

    def __init__(self, service_url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.service_url = service_url if service_url is not None else settings.TRANSCRIPT_SERVICE_URL
        self.api_key = api_key if api_key is not None else settings.TRANSCRIPT_SERVICE_API_KEY
        self.timeout = timeout or settings.TRANSCRIPT_TIMEOUT_SECONDS

    async def generate(self, media_url: Optional[str], duration: int) -> TranscriptResult:
        """Never raises; failures degrade to the placeholder text."""
        try:
            if self.service_url:
                transcript = await self._request_transcript(media_url, duration)
            else:
                transcript = build_draft_transcript(duration)
            return TranscriptResult(success=True, transcript=transcript)
        except Exception as e:
            logger.warning(f"Transcript generation failed for {media_url}: {e}")
            return TranscriptResult(success=False, transcript=TRANSCRIPT_FALLBACK)

    async def _request_transcript(self, media_url: Optional[str], duration: int) -> str:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.service_url,
                json={"media_url": media_url, "duration": duration},
                headers=headers,
            )
            response.raise_for_status()
            transcript = response.json().get("transcript")
        if not transcript or not str(transcript).strip():
            raise ValueError("Transcript service returned an empty transcript")
        return str(transcript).strip()


_SHORT = """Welcome to this lesson. In this short video, we'll cover the key concepts you need to understand.

Let's start with the basics. This is an important topic that you should pay attention to.

Here are the main points:
1. First concept
2. Second concept
3. Third concept

That's it for this lesson. Make sure to practice what you've learned."""

_MEDIUM = """Hello and welcome to this lesson. Today we're going to dive deep into an important topic.

First, let me introduce the main concepts we'll be covering. This is fundamental knowledge that you'll need to understand before moving forward.

Let's start with the first concept. It forms the foundation for everything else we'll learn.

Now, let's move on to the second concept. This builds upon what we just learned and takes it to the next level.

Here's a practical example to help you understand better. This is how you would apply this knowledge in a real-world scenario.

Finally, let's summarize what we've covered:
- Key point one
- Key point two
- Key point three

Remember to practice these concepts and don't hesitate to rewatch this video if you need clarification."""

_LONG = """Welcome to this comprehensive lesson. We're going to cover a lot of ground today, so let's get started.

First, let me give you an overview of what we'll be learning. This lesson is designed to give you a solid understanding of the topic.

Let's begin with the fundamentals. Understanding these basics is essential before we move on to more advanced concepts.

Now that we have the foundation, let's explore the first major concept, with a step by step explanation and examples.

Moving on to the second major concept. This builds upon what we've already learned and introduces new ideas, followed by a practical application.

Now let's cover the third concept. This is more advanced, but with the foundation we've built, you should be able to follow along.

Here are some important considerations to keep in mind. These are common pitfalls that students often encounter.

Finally, let's summarize everything we've learned:
- Key concept one and its applications
- Key concept two and when to use it
- Key concept three and best practices
- Important considerations and common mistakes

Take your time to understand each concept before moving on."""

_IN_DEPTH = """Welcome to this in-depth lesson. We have a lot of material to cover today, so take notes and pause the video whenever you need to.

Let me start by giving you a comprehensive overview of what we'll be learning.

First, let's establish the fundamental concepts. These are the building blocks that everything else will be based on.

We'll then work through four major sections, each with detailed explanations and practical applications, moving from the essentials to advanced techniques and optimization strategies.

Along the way we'll look at best practices, common pitfalls and troubleshooting tips that will help you when you're working on your own projects.

Let's finish with a comprehensive example that incorporates everything we've learned.

To summarize:
- Fundamental concepts and their importance
- Practical applications of each major section
- Advanced techniques and optimization strategies
- Best practices, common pitfalls and troubleshooting

Review the material at your own pace and try implementing what you've learned in your own projects. Thank you for your attention, and I'll see you in the next lesson."""

_CLOSING = "That concludes our lesson. Thank you for watching, and I'll see you in the next video."


def build_draft_transcript(duration: int) -> str:
    """Pick a transcript template by video length (seconds)."""
    duration = max(int(duration or 0), 0)
    minutes, seconds = divmod(duration, 60)

    if minutes < 2:
        transcript = _SHORT
    elif minutes < 5:
        transcript = _MEDIUM
    elif minutes < 10:
        transcript = _LONG
    else:
        transcript = _IN_DEPTH

    if seconds > 30:
        transcript += f"\n\n{_CLOSING}"
    return transcript


transcript_generator = TranscriptGenerator()
