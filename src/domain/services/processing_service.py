from __future__ import annotations

import numpy as np


class ProcessingService:
    """Pure NumPy image processing. Inputs and outputs are float32 arrays normalized to [0, 1].

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)
    - RGBA: (H, W, 4); color operations leave the alpha channel untouched
    """

    # Brightness: I_out = I_in + factor
    @staticmethod
    def adjust_brightness(matrix: np.ndarray, factor: float) -> np.ndarray:
        return _map_color(matrix, lambda c: np.clip(c + float(factor), 0.0, 1.0))

    # Linear contrast around mid-gray: I_out = (I_in - 0.5) * (1 + amount) + 0.5
    @staticmethod
    def adjust_contrast(matrix: np.ndarray, amount: float) -> np.ndarray:
        gain = 1.0 + float(amount)
        return _map_color(matrix, lambda c: np.clip((c - 0.5) * gain + 0.5, 0.0, 1.0))

    # Saturation: I_out = L + (I_in - L) * (1 + amount), L = luminosity
    @staticmethod
    def adjust_saturation(matrix: np.ndarray, amount: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim != 3:
            return mat
        gain = 1.0 + float(amount)

        def _saturate(c: np.ndarray) -> np.ndarray:
            lum = ProcessingService.grayscale_luminosity(c)[..., None]
            return np.clip(lum + (c - lum) * gain, 0.0, 1.0)

        return _map_color(mat, _saturate)

    # Invert: I_out = 1 - I_in
    @staticmethod
    def invert_color(matrix: np.ndarray) -> np.ndarray:
        return _map_color(matrix, lambda c: 1.0 - c)

    # Grayscale (Luminosity): 0.299*R + 0.587*G + 0.114*B
    @staticmethod
    def grayscale_luminosity(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
            return np.dot(mat[..., :3], weights).astype(np.float32)
        return mat

    # Grayscale kept in the source channel layout so it can be re-encoded as-is
    @staticmethod
    def desaturate(matrix: np.ndarray) -> np.ndarray:
        def _gray(c: np.ndarray) -> np.ndarray:
            lum = ProcessingService.grayscale_luminosity(c)
            return np.repeat(lum[..., None], 3, axis=2)

        return _map_color(matrix, _gray)

    # Sepia tone matrix
    @staticmethod
    def sepia(matrix: np.ndarray) -> np.ndarray:
        kernel = np.array(
            [[0.393, 0.769, 0.189], [0.349, 0.686, 0.168], [0.272, 0.534, 0.131]],
            dtype=np.float32,
        )
        return _map_color(matrix, lambda c: np.clip(_as_rgb(c) @ kernel.T, 0.0, 1.0))

    # Binarize: I_out = 1 if I >= threshold else 0
    @staticmethod
    def binarize(matrix: np.ndarray, threshold: float) -> np.ndarray:
        return (matrix.astype(np.float32) >= float(threshold)).astype(np.float32)

    # Box blur with edge padding; radius 0 is identity
    @staticmethod
    def box_blur(matrix: np.ndarray, radius: int) -> np.ndarray:
        radius = int(radius)
        mat = matrix.astype(np.float32)
        if radius <= 0:
            return mat
        size = 2 * radius + 1
        pad = [(radius, radius), (radius, radius)] + [(0, 0)] * (mat.ndim - 2)
        padded = np.pad(mat, pad, mode="edge")
        # separable: horizontal pass then vertical pass via cumulative sums
        csum = np.cumsum(padded, axis=1, dtype=np.float64)
        csum = np.concatenate([np.zeros_like(csum[:, :1]), csum], axis=1)
        horiz = (csum[:, size:] - csum[:, :-size]) / size
        csum = np.cumsum(horiz, axis=0)
        csum = np.concatenate([np.zeros_like(csum[:1]), csum], axis=0)
        out = (csum[size:] - csum[:-size]) / size
        return out.astype(np.float32)

    # Crop region [y_start:y_end, x_start:x_end]
    @staticmethod
    def crop(matrix: np.ndarray, x_start: int, x_end: int, y_start: int, y_end: int) -> np.ndarray:
        return matrix.astype(np.float32)[y_start:y_end, x_start:x_end]

    # Reduce resolution by subsampling every `factor` pixels
    @staticmethod
    def reduce_resolution(matrix: np.ndarray, factor: int) -> np.ndarray:
        factor = int(factor)
        if factor <= 0:
            raise ValueError("factor must be > 0")
        mat = matrix.astype(np.float32)
        if mat.ndim == 2:
            return mat[::factor, ::factor]
        return mat[::factor, ::factor, :]

    # Enlarge by integer factor using pixel replication (nearest-neighbor via kron)
    @staticmethod
    def enlarge(matrix: np.ndarray, factor: int) -> np.ndarray:
        factor = int(factor)
        if factor <= 0:
            raise ValueError("factor must be > 0")
        mat = matrix.astype(np.float32)
        if mat.ndim == 3:
            return np.kron(mat, np.ones((factor, factor, 1), dtype=np.float32)).astype(np.float32)
        return np.kron(mat, np.ones((factor, factor), dtype=np.float32)).astype(np.float32)

    # Pixelate: subsample then replicate back, trimmed to the input size
    @staticmethod
    def pixelate(matrix: np.ndarray, block: int) -> np.ndarray:
        h, w = matrix.shape[:2]
        small = ProcessingService.reduce_resolution(matrix, block)
        return ProcessingService.enlarge(small, block)[:h, :w]

    # Merge images with transparency: out = (1 - a) * img1 + a * img2.
    # Resize img2 to img1 shape if needed via simple nearest-neighbor.
    @staticmethod
    def merge_images(img1: np.ndarray, img2: np.ndarray, transparency: float) -> np.ndarray:
        a = float(np.clip(transparency, 0.0, 1.0))
        a1 = 1.0 - a
        im1 = img1.astype(np.float32)
        im2 = img2.astype(np.float32)
        if im1.shape[:2] != im2.shape[:2]:
            im2 = ProcessingService._resize_nearest(im2, im1.shape[:2])
        if im1.ndim == 2:
            im2 = ProcessingService.grayscale_luminosity(im2)
        else:
            im2 = _as_rgb(im2)
            if im1.shape[2] == 4:
                im2 = np.concatenate([im2, im1[..., 3:]], axis=2)
        out = np.clip(a1 * im1 + a * im2, 0.0, 1.0)
        return out.astype(np.float32)

    # Attach an alpha mask (H, W) to an RGB(A) image
    @staticmethod
    def with_alpha(matrix: np.ndarray, alpha: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 2:
            mat = np.repeat(mat[..., None], 3, axis=2)
        rgb = mat[..., :3]
        return np.concatenate([rgb, alpha.astype(np.float32)[..., None]], axis=2)

    # --------- helpers ---------
    @staticmethod
    def _resize_nearest(img: np.ndarray, target_hw: tuple[int, int]) -> np.ndarray:
        th, tw = target_hw
        h, w = img.shape[:2]
        if h == th and w == tw:
            return img
        ys = (np.arange(th) * (h / th)).astype(np.int64)
        xs = (np.arange(tw) * (w / tw)).astype(np.int64)
        ys = np.clip(ys, 0, h - 1)
        xs = np.clip(xs, 0, w - 1)
        if img.ndim == 2:
            return img[ys[:, None], xs[None, :]].astype(np.float32)
        return img[ys[:, None], xs[None, :], :].astype(np.float32)


def _as_rgb(matrix: np.ndarray) -> np.ndarray:
    if matrix.ndim == 2:
        return np.repeat(matrix[..., None], 3, axis=2)
    return matrix[..., :3]


def _map_color(matrix: np.ndarray, fn) -> np.ndarray:
    # apply fn to the color channels only; alpha passes through
    mat = matrix.astype(np.float32)
    if mat.ndim == 3 and mat.shape[2] == 4:
        color = fn(mat[..., :3])
        return np.concatenate([color, mat[..., 3:]], axis=2).astype(np.float32)
    return np.asarray(fn(mat), dtype=np.float32)
