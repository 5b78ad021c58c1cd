"""Image encoding components.

Supported encoders:
- CLIP: Excellent for semantic understanding (vision + text)
- DINOv2: Meta's self-supervised model, excellent for pure visual features
- Color histogram: deterministic, model-free, for offline runs and tests
"""

import os
import numpy as np
from PIL import Image
from typing import List, Dict, Optional
from tqdm import tqdm

from config import Config
from .errors import EncodeError


class Encoder:
    """Maps normalized images to fixed-length feature vectors."""

    embedding_dim = 0

    def encode(self, images: List[Image.Image]) -> np.ndarray:
        """Encode a batch of images.

        Args:
            images: Normalized PIL images

        Returns:
            Numpy array of shape (num_images, embedding_dim)
        """
        raise NotImplementedError


class ColorHistogramEncoder(Encoder):
    """Per-channel color histograms, L1-normalized."""

    def __init__(self, bins: int = 16):
        self.bins = bins
        self.embedding_dim = 3 * bins

    def encode(self, images: List[Image.Image]) -> np.ndarray:
        vectors = []
        for img in images:
            arr = np.asarray(img.convert('RGB'), dtype=np.uint8)
            channels = [
                np.histogram(arr[:, :, c], bins=self.bins, range=(0, 256))[0]
                for c in range(3)
            ]
            hist = np.concatenate(channels).astype(np.float32)
            vectors.append(hist / max(hist.sum(), 1.0))
        return np.vstack(vectors) if vectors else np.zeros((0, self.embedding_dim), dtype=np.float32)


class ImageEmbedder(Encoder):
    """Generates embeddings for images using CLIP or DINOv2."""

    def __init__(self, model_name: str = 'clip-ViT-B-32', device: Optional[str] = None,
                 batch_size: int = 32, show_progress: bool = True):
        """Initialize the image embedder.

        Args:
            model_name: Model to use:
                - 'clip-ViT-B-32': CLIP (vision + text, 512D)
                - 'dinov2-small': DINOv2 small (384D, fast)
                - 'dinov2-base': DINOv2 base (768D, balanced)
                - 'dinov2-large': DINOv2 large (1024D, best quality)
            device: Device to run the model on ('cuda', 'mps', or 'cpu')
            batch_size: Number of images per forward pass
            show_progress: Whether to show a progress bar
        """
        import torch

        if device is None:
            if torch.cuda.is_available():
                device = 'cuda'
            elif torch.backends.mps.is_available():
                device = 'mps'
            else:
                device = 'cpu'

        self.device = device
        self.model_name = model_name
        self.model_type = 'dinov2' if 'dinov2' in model_name else 'clip'
        self.batch_size = batch_size
        self.show_progress = show_progress

        print(f"Initializing ImageEmbedder with {self.model_type.upper()} model '{model_name}' on device '{self.device}'")

        try:
            if self.model_type == 'dinov2':
                self._init_dinov2(model_name)
            else:
                self._init_clip(model_name)
        except Exception as e:
            raise EncodeError(f"Cannot load embedding model '{model_name}': {e}") from e

    def _init_clip(self, model_name: str):
        """Initialize CLIP model."""
        from sentence_transformers import SentenceTransformer

        self.model = SentenceTransformer(model_name, device=self.device)
        self.embedding_dim = self.model.get_sentence_embedding_dimension()
        print(f"✓ CLIP model loaded. Embedding dimension: {self.embedding_dim}")

    def _init_dinov2(self, model_name: str):
        """Initialize DINOv2 model."""
        from transformers import AutoImageProcessor, AutoModel

        # DINOv2 has MPS compatibility issues (upsample_bicubic2d operator)
        if self.device == 'mps':
            os.environ['PYTORCH_ENABLE_MPS_FALLBACK'] = '1'

        # Map short names to full Hugging Face model names
        model_map = {
            'dinov2-small': 'facebook/dinov2-small',
            'dinov2-base': 'facebook/dinov2-base',
            'dinov2-large': 'facebook/dinov2-large',
            'dinov2-giant': 'facebook/dinov2-giant'
        }

        full_model_name = model_map.get(model_name, model_name)

        print(f"Loading DINOv2 model: {full_model_name}")
        self.processor = AutoImageProcessor.from_pretrained(full_model_name, use_fast=True)
        self.model = AutoModel.from_pretrained(full_model_name).to(self.device)
        self.model.eval()
        self.embedding_dim = self.model.config.hidden_size

        print(f"✓ DINOv2 model loaded. Embedding dimension: {self.embedding_dim}")

    def encode(self, images: List[Image.Image]) -> np.ndarray:
        """Generate embeddings for a batch of images.

        Any failure is fatal: a zero vector would silently distort the layout.

        Args:
            images: List of PIL Image objects

        Returns:
            Numpy array of shape (num_images, embedding_dim)

        Raises:
            EncodeError: If any batch fails
        """
        embeddings = []

        iterator = range(0, len(images), self.batch_size)
        if self.show_progress:
            iterator = tqdm(iterator, desc=f"{self.model_type.upper()} embeddings", ncols=80)

        for i in iterator:
            batch = [img if img.mode == 'RGB' else img.convert('RGB')
                     for img in images[i:i + self.batch_size]]
            try:
                if self.model_type == 'dinov2':
                    embeddings.append(self._encode_dinov2_batch(batch))
                else:
                    embeddings.append(self.model.encode(batch,
                                                        convert_to_numpy=True,
                                                        batch_size=len(batch)))
            except Exception as e:
                raise EncodeError(f"Encoding failed for batch at index {i}: {e}") from e

        if not embeddings:
            return np.zeros((0, self.embedding_dim), dtype=np.float32)
        return np.vstack(embeddings)

    def _encode_dinov2_batch(self, batch: List[Image.Image]) -> np.ndarray:
        """Generate DINOv2 CLS-token embeddings for one batch."""
        import torch

        inputs = self.processor(images=batch, return_tensors="pt")
        inputs = {k: v.to(self.device) for k, v in inputs.items()}

        with torch.no_grad():
            outputs = self.model(**inputs)
            # CLS token (first token) of each image
            return outputs.last_hidden_state[:, 0, :].cpu().numpy()


def save_embeddings(embeddings: np.ndarray, metadata: List[Dict], output_path: str):
    """Save embeddings and metadata to disk.

    Args:
        embeddings: Numpy array of embeddings
        metadata: List of metadata dicts (same order as embeddings)
        output_path: Path to save the embeddings
    """
    os.makedirs(os.path.dirname(output_path), exist_ok=True)

    np.savez_compressed(
        output_path,
        embeddings=embeddings,
        metadata=np.array(metadata, dtype=object)
    )


def load_embeddings(input_path: str) -> tuple:
    """Load embeddings and metadata saved by save_embeddings.

    Returns:
        Tuple of (embeddings, metadata)
    """
    data = np.load(input_path, allow_pickle=True)
    return data['embeddings'], data['metadata'].tolist()


def create_encoder(config=Config) -> Encoder:
    """Build the encoder named by config.EMBEDDING_MODEL."""
    if config.EMBEDDING_MODEL == 'color-histogram':
        return ColorHistogramEncoder(bins=config.HISTOGRAM_BINS)

    device = None if config.USE_GPU_IF_AVAILABLE else 'cpu'
    return ImageEmbedder(config.EMBEDDING_MODEL,
                         device=device,
                         batch_size=config.EMBEDDING_BATCH_SIZE,
                         show_progress=config.SHOW_PROGRESS)
