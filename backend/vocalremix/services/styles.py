from vocalremix.models.style import MusicStyle

MUSIC_STYLES: list[MusicStyle] = [
    MusicStyle(
        id="pop",
        name="Pop",
        description="Catchy, upbeat, and radio-friendly",
        icon="🎤",
        prompt="modern pop with catchy hooks, bright production, contemporary sound",
        tags=["pop", "upbeat", "catchy", "modern"],
    ),
    MusicStyle(
        id="rock",
        name="Rock",
        description="Powerful guitars and driving rhythm",
        icon="🎸",
        prompt="rock with electric guitars, powerful drums, energetic arrangement",
        tags=["rock", "electric guitar", "powerful", "energetic"],
    ),
    MusicStyle(
        id="jazz",
        name="Jazz",
        description="Smooth, sophisticated, and soulful",
        icon="🎷",
        prompt="smooth jazz with sophisticated harmonies, soulful arrangement, swing feel",
        tags=["jazz", "smooth", "soulful", "swing"],
    ),
    MusicStyle(
        id="electronic",
        name="Electronic",
        description="Synths, beats, and digital textures",
        icon="🎹",
        prompt="electronic music with synthesizers, modern beats, digital production",
        tags=["electronic", "synth", "edm", "modern"],
    ),
    MusicStyle(
        id="hiphop",
        name="Hip Hop",
        description="Urban beats and rhythmic flow",
        icon="🎧",
        prompt="hip hop with urban beats, rhythmic flow, modern production",
        tags=["hip hop", "rap", "urban", "beats"],
    ),
    MusicStyle(
        id="acoustic",
        name="Acoustic",
        description="Organic, intimate, and natural",
        icon="🪕",
        prompt="acoustic arrangement with organic instruments, intimate feel, natural sound",
        tags=["acoustic", "organic", "intimate", "natural"],
    ),
    MusicStyle(
        id="lofi",
        name="Lo-Fi",
        description="Chill, nostalgic, and relaxed",
        icon="🌙",
        prompt="lo-fi hip hop with chill beats, nostalgic atmosphere, relaxed vibe",
        tags=["lofi", "chill", "nostalgic", "relaxed"],
    ),
    MusicStyle(
        id="country",
        name="Country",
        description="Storytelling with twang and heart",
        icon="🤠",
        prompt="country music with storytelling, acoustic guitars, heartfelt vocals",
        tags=["country", "acoustic", "storytelling", "americana"],
    ),
]

_BY_ID = {style.id: style for style in MUSIC_STYLES}


def get_style(style_id: str) -> MusicStyle | None:
    return _BY_ID.get(style_id)


def list_styles() -> list[MusicStyle]:
    return list(MUSIC_STYLES)


def build_prompt(style: MusicStyle, custom_prompt: str | None = None) -> str:
    """Return the caller's prompt if given, else the style's remix instruction."""
    if custom_prompt:
        return custom_prompt
    return f"Remix the vocals into a {style.prompt}"
