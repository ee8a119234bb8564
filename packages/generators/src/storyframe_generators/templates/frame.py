"""Storyboard frame prompt template."""

FRAME_PROMPT = """
## ROLE & TASK (MOST IMPORTANT)
You are a veteran storyboard artist for a leading animation studio and a master of visual storytelling. Your job is not to "make a picture" but to DIRECT this frame so it carries the emotion and the story.

---

## STORY CONTEXT
{{ story_context }}

--- ABSOLUTE COMMANDS ---
{% set counter = namespace(n=1) %}
{{ counter.n }}. **ARTISTIC & CINEMATIC QUALITY:**
   - Think like a director: every frame is a piece of art, not a stock photo.
   - Composition: use cinematic rules (thirds, leading lines, frame within a frame) for depth and focus.
   - Lighting: sculpt the characters, set the mood and steer the emotion. Light must have a purpose.
   - Color: the palette reinforces the emotion of the scene.
   - Character acting: expressions and body language are subtle, believable and alive.
   - Atmosphere: dreamy, artistic, rich in emotion.
{% set counter.n = counter.n + 1 %}
{% if art_style %}
{{ counter.n }}. **MANDATORY ART STYLE:** The whole image must strictly follow this style: **{{ art_style }}**. This is the most important aesthetic instruction.
{% set counter.n = counter.n + 1 %}
{% endif %}
{{ counter.n }}. **ABSOLUTELY CLEAN IMAGE:**
   - NO TEXT: the image must not contain any text, letters or characters of any kind. No exceptions.
   - TRANSFORM DIALOGUE: if the prompt contains dialogue, turn it into EXPRESSION AND ACTION. Instead of writing "Help!", draw the character shouting with a frightened face.
   - NO logos, watermarks or signatures of any kind.
   - A single character or logo in the image counts as a complete failure.
{% set counter.n = counter.n + 1 %}
{% if not variant %}
{{ counter.n }}. **SCENE PROGRESSION:** The image must show an ENTIRELY NEW moment. The current scene's instruction has absolute priority. Composition, camera angle and action must differ clearly from the previous frame. DO NOT REPEAT THE PREVIOUS COMPOSITION.
{% set counter.n = counter.n + 1 %}
{% endif %}
{{ counter.n }}. **EXACT ACTION:** Read the instruction carefully and depict exactly the action it describes ("looking at" is not "hugging").

--- CONSISTENCY RULES (APPLY AFTER THE ABSOLUTE COMMANDS) ---

{% if character_name and has_previous %}
**REFERENCE IMAGES (CRITICAL):** TWO (2) reference images come with this instruction.
- **IMAGE 1 (CHARACTER REFERENCE):** the ORIGINAL look of **'{{ character_name }}'**. Keep 100% of the identifying features (face, hair, skin tone and above all the OUTFIT). The outfit in the reference is an UNBREAKABLE RULE.
- **IMAGE 2 (STYLE REFERENCE):** the IMMEDIATELY PRECEDING frame. Copy its ART STYLE, COLOR TONES and LIGHTING exactly, so both frames feel cut from the same film.
**CHANGING THE CHARACTER OR THE STYLE RELATIVE TO THESE REFERENCES IS THE MOST SERIOUS ERROR.**
{% elif character_name %}
**REFERENCE IMAGE (CRITICAL):** ONE (1) original reference image of **'{{ character_name }}'** is provided. Keep 100% of the identifying features (face, hair, skin tone and above all the OUTFIT). The outfit in the reference is an UNBREAKABLE RULE.
{% elif has_previous %}
**REFERENCE IMAGE (CRITICAL):** ONE (1) reference image of the IMMEDIATELY PRECEDING frame is provided. Copy its ART STYLE, COLOR TONES and LIGHTING exactly to keep the sequence seamless.
{% endif %}

- **REMEMBER THE SETTING:** once a location is established, its architecture and main furniture MUST STAY THE SAME in later frames set in the same place.
- **TIME & PLACE LOGIC:** keep continuity. Follow every detail given about time (morning, evening, day, night) and location.

--- PROMPT FOR THIS FRAME ---
{{ prompt }}
""".strip()
