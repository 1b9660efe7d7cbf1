"""Content categories and the static values substituted when a step fails.

Every table is keyed by every ContentType member and paired with a
required default, so a new category cannot silently miss an entry.
"""

from enum import Enum


class ContentType(str, Enum):
    TIKTOK = "tiktok"
    REELS = "reels"
    SHORTS = "shorts"
    VSL = "vsl"
    ADS = "ads"
    ROTEIRO = "roteiro"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str) -> "ContentType":
        """Map a submitted type string to a category; unknown values are CUSTOM."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.CUSTOM

    @property
    def is_vertical(self) -> bool:
        return self in VERTICAL_TYPES


VERTICAL_TYPES = {ContentType.TIKTOK, ContentType.REELS, ContentType.SHORTS}


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------

_SHORT_FORM_SCRIPT = """🔥 3 SEGREDOS QUE NINGUÉM TE CONTA 🔥

[CENA 1 - Hook]
❓ "Por que quase ninguém chega lá?"

[CENA 2 - Problema]
😤 Todo mundo começa animado...
❌ Sem plano
❌ Sem rotina
❌ Sem método

[CENA 3 - Solução]
✅ SEGREDO #1: Clareza de objetivo
✅ SEGREDO #2: Um passo por dia
✅ SEGREDO #3: Não parar na primeira queda

[CENA 4 - CTA]
💬 "Qual desses você começa HOJE?"
📱 "Comenta e segue para a parte 2!"

#Dicas #Motivação #Foco #Viral"""

_SALES_SCRIPT = """🎯 O MÉTODO QUE MUDOU O JOGO

[PROBLEMA]
Você já tentou de tudo e continua no mesmo lugar?

[AGITAÇÃO]
Enquanto você espera o momento certo, outros já estão colhendo resultados.

[SOLUÇÃO]
Um sistema simples, passo a passo:
✅ Método testado
✅ Aplicação em minutos por dia
✅ Resultados visíveis em 30 dias

[PROVA]
Milhares de pessoas já aplicaram e aprovaram.

[OFERTA]
Condição especial por tempo limitado, com bônus exclusivo.

[CTA]
👆 Clique agora e garanta sua vaga!"""

_GENERIC_SCRIPT = """📝 ROTEIRO - ESTRUTURA BASE

🎬 ABERTURA (0-3s)
- Gancho visual forte
- Pergunta que gera curiosidade
- Promessa clara

🎥 DESENVOLVIMENTO (3-25s)
- Apresente o problema
- Construa tensão
- Mostre a solução
- Traga prova social

🎯 FECHAMENTO (25-30s)
- Chamada para ação direta
- Senso de urgência
- Peça interação

#Conteúdo #Engajamento #Resultado"""

DEFAULT_FALLBACK_SCRIPT = _GENERIC_SCRIPT

FALLBACK_SCRIPTS: dict[ContentType, str] = {
    ContentType.TIKTOK: _SHORT_FORM_SCRIPT,
    ContentType.REELS: _SHORT_FORM_SCRIPT,
    ContentType.SHORTS: _SHORT_FORM_SCRIPT,
    ContentType.VSL: _SALES_SCRIPT,
    ContentType.ADS: _SALES_SCRIPT,
    ContentType.ROTEIRO: _GENERIC_SCRIPT,
    ContentType.CUSTOM: _GENERIC_SCRIPT,
}


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

_VERTICAL_IMAGE = "https://images.unsplash.com/photo-1611262588024-d12430b98920?w=400&h=600"
_REELS_IMAGE = "https://images.unsplash.com/photo-1611605698323-b1e99cfd37ea?w=400&h=600"
_LANDSCAPE_IMAGE = "https://images.unsplash.com/photo-1560472354-b33ff0c44a43?w=600&h=400"

DEFAULT_FALLBACK_IMAGE = _VERTICAL_IMAGE

FALLBACK_IMAGES: dict[ContentType, str] = {
    ContentType.TIKTOK: _VERTICAL_IMAGE,
    ContentType.REELS: _REELS_IMAGE,
    ContentType.SHORTS: _REELS_IMAGE,
    ContentType.VSL: _LANDSCAPE_IMAGE,
    ContentType.ADS: _LANDSCAPE_IMAGE,
    ContentType.ROTEIRO: _VERTICAL_IMAGE,
    ContentType.CUSTOM: _VERTICAL_IMAGE,
}


# ---------------------------------------------------------------------------
# Render templates
# ---------------------------------------------------------------------------

DEFAULT_RENDER_TEMPLATE = "tiktok-template-id"

RENDER_TEMPLATES: dict[ContentType, str] = {
    ContentType.TIKTOK: "tiktok-template-id",
    ContentType.REELS: "reels-template-id",
    ContentType.SHORTS: "shorts-template-id",
    ContentType.VSL: "vsl-template-id",
    ContentType.ADS: "ads-template-id",
    ContentType.ROTEIRO: "tiktok-template-id",
    ContentType.CUSTOM: "tiktok-template-id",
}


# ---------------------------------------------------------------------------
# Audio and video
# ---------------------------------------------------------------------------

FALLBACK_CDN = "https://mock-cdn.clipforge.app"

FALLBACK_AUDIO_URL = f"{FALLBACK_CDN}/audio/sample_narration.mp3"


def fallback_script(content_type: ContentType) -> str:
    return FALLBACK_SCRIPTS.get(content_type, DEFAULT_FALLBACK_SCRIPT)


def fallback_image_url(content_type: ContentType) -> str:
    return FALLBACK_IMAGES.get(content_type, DEFAULT_FALLBACK_IMAGE)


def fallback_video_url(content_type: ContentType) -> str:
    """Deterministic placeholder video for a category."""
    return f"{FALLBACK_CDN}/videos/sample_{content_type.value}.mp4"


def render_template(content_type: ContentType, overrides: dict[str, str] | None = None) -> str:
    """Template id for a category; configured overrides win over the built-ins."""
    if overrides and content_type.value in overrides:
        return overrides[content_type.value]
    return RENDER_TEMPLATES.get(content_type, DEFAULT_RENDER_TEMPLATE)
