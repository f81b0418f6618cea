"""Image size and layer count check."""

from __future__ import annotations

from check_image.core.image import ImageLoader
from check_image.core.params import CheckParameters
from check_image.models.result import CheckOutcome, LayerSize, SizeDetails

BYTES_PER_MB = 1024 * 1024


def run_size(reference: str, params: CheckParameters, loader: ImageLoader) -> CheckOutcome:
    """Fail when the image has more than ``max-layers`` layers or exceeds ``max-size`` MB."""
    layers = loader.load(reference).metadata.layers
    total_bytes = sum(layer.size for layer in layers)

    layers_ok = len(layers) <= params.max_layers
    size_ok = total_bytes <= params.max_size * BYTES_PER_MB

    if not layers_ok and not size_ok:
        message = (
            f"Image has more than {params.max_layers} layers and size exceeds "
            f"the recommended limit of {params.max_size} MB"
        )
    elif not layers_ok:
        message = f"Image has more than {params.max_layers} layers"
    elif not size_ok:
        message = f"Image size exceeds the recommended limit of {params.max_size} MB"
    else:
        message = f"Image size is within the allowed limit of {params.max_size} MB"

    return CheckOutcome(
        check="size",
        image=reference,
        passed=layers_ok and size_ok,
        message=message,
        details=SizeDetails(
            total_bytes=total_bytes,
            total_mb=total_bytes / BYTES_PER_MB,
            max_size_mb=params.max_size,
            layer_count=len(layers),
            max_layers=params.max_layers,
            layers=[LayerSize(index=i + 1, bytes=layer.size) for i, layer in enumerate(layers)],
        ),
    )
