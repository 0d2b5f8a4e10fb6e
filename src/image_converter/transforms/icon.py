from __future__ import annotations

from ..codec import IconFrame, contain_square, pack_icon_set
from ..models import Artifact, IconOptions, InputItem, Operation
from .base import decode, translate_errors


class IconTransform:
    operation = Operation.ICON

    def __call__(self, item: InputItem, options: IconOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        frames = [IconFrame(size=size, image=contain_square(decoded.image, size)) for size in options.sizes]
        with translate_errors(item.name):
            content = pack_icon_set(frames)
        name = f"icon_{'x'.join(str(size) for size in options.sizes)}_32bit.ico"
        return Artifact(
            name=name,
            content=content,
            media_type="image/x-icon",
            metadata={"format": "ico", "sizes": list(options.sizes), "size": len(content), "source": item.name},
        )
