"""
Программа: «Spektr» – сервис извлечения цветовых палитр из изображений.
Модуль: utils/kmeans.py – квантование цветов методом k-means.

Назначение модуля:
- Евклидово расстояние между RGB-векторами.
- Взвешенный случайный выбор элемента последовательности.
- Начальная расстановка центроидов по схеме k-means++.
- Итеративная кластеризация (алгоритм Ллойда) до сходимости центроидов.
"""

import logging
import random

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100


class InvalidInputError(ValueError):
    """Некорректные входные данные кластеризации."""


class DegenerateWeightError(InvalidInputError):
    """Сумма весов равна нулю, взвешенный выбор невозможен."""


def _as_points(samples) -> np.ndarray:
    """Приводит набор RGB-сэмплов к массиву формы (n, 3) типа int64."""
    try:
        points = np.asarray(samples)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidInputError("Сэмплы должны быть RGB-векторами из трёх целых чисел") from exc

    if points.size == 0:
        raise InvalidInputError("Набор сэмплов пуст")
    # Дробные, строковые и слишком большие значения не приводятся молча
    if points.ndim != 2 or points.shape[1] != 3 or not np.issubdtype(points.dtype, np.integer):
        raise InvalidInputError("Сэмплы должны быть RGB-векторами из трёх целых чисел")
    if points.min() < 0 or points.max() > 255:
        raise InvalidInputError("Значения каналов должны лежать в диапазоне 0..255")
    return points.astype(np.int64)


def _check_k(k) -> None:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidInputError("Количество кластеров должно быть целым числом")
    if k <= 0:
        raise InvalidInputError("Количество кластеров должно быть положительным")


def _as_tuples(centroids: np.ndarray) -> list[tuple[int, int, int]]:
    return [tuple(int(channel) for channel in centroid) for centroid in centroids]


def distance(a, b):
    """Евклидово расстояние между RGB-векторами.

    Аргументы могут быть массивами векторов: расчёт идёт по последней оси,
    поэтому distance(points, centroid) вернёт расстояние до каждой точки.
    """
    delta = np.asarray(a, dtype=np.int64) - np.asarray(b, dtype=np.int64)
    result = np.sqrt((delta * delta).sum(axis=-1))
    if np.ndim(result) == 0:
        return float(result)
    return result


def weighted_choice(items, weights, rng: random.Random | None = None):
    """Выбирает элемент с вероятностью, пропорциональной его весу.

    Берётся случайное r из [0, total) и возвращается первый элемент,
    накопленный вес которого превышает r. Элементы с нулевым весом
    не выбираются никогда.
    """
    rng = rng or random.Random()

    if len(items) == 0:
        raise InvalidInputError("Нельзя выбрать элемент из пустой последовательности")

    weights = np.asarray(weights, dtype=np.float64)
    if weights.shape != (len(items),):
        raise InvalidInputError("Количество весов не совпадает с количеством элементов")
    if not np.isfinite(weights).all() or (weights < 0).any():
        raise InvalidInputError("Веса должны быть конечными неотрицательными числами")

    total = weights.sum()
    if total <= 0:
        raise DegenerateWeightError("Сумма весов равна нулю")

    threshold = rng.random() * total
    index = int(np.searchsorted(np.cumsum(weights), threshold, side="right"))
    # Погрешность суммирования не должна выводить на хвост из нулевых весов
    last_positive = int(np.flatnonzero(weights)[-1])
    return items[min(index, last_positive)]


def generate_initial_centroids(k: int, samples, rng: random.Random | None = None) -> list[tuple[int, int, int]]:
    """Начальные центроиды по схеме k-means++.

    Первый центроид выбирается равновероятно, каждый следующий выбирается с весом,
    равным квадрату расстояния от сэмпла до ближайшего уже выбранного центроида.
    """
    _check_k(k)
    rng = rng or random.Random()
    points = _as_points(samples)
    n = points.shape[0]

    chosen = [points[rng.randrange(n)]]
    nearest = distance(points, chosen[0]) ** 2

    while len(chosen) < k:
        try:
            centroid = weighted_choice(points, nearest, rng)
        except DegenerateWeightError:
            # Все точки совпадают с центроидами: различных цветов меньше k
            logger.debug("Нулевые веса k-means++, центроид %d выбран равновероятно", len(chosen))
            centroid = points[rng.randrange(n)]
        chosen.append(centroid)
        nearest = np.minimum(nearest, distance(points, centroid) ** 2)

    return _as_tuples(chosen)


def assign_clusters(points, centroids) -> np.ndarray:
    """Номер ближайшего центроида для каждой точки (при равенстве выигрывает меньший номер)."""
    points = np.asarray(points, dtype=np.int64)
    centroids = np.asarray(centroids, dtype=np.int64)
    distances = distance(points[:, None, :], centroids[None, :, :])
    return distances.argmin(axis=1)


def update_centroids(points, labels, centroids) -> np.ndarray:
    """Пересчитывает центроиды как округлённые средние своих кластеров.

    Округление половины вверх. Пустой кластер сохраняет прежний центроид.
    """
    points = np.asarray(points, dtype=np.int64)
    labels = np.asarray(labels)
    updated = np.array(centroids, dtype=np.int64)
    k = updated.shape[0]

    counts = np.bincount(labels, minlength=k)
    sums = np.stack(
        [np.bincount(labels, weights=points[:, channel], minlength=k) for channel in range(3)],
        axis=1,
    ).astype(np.int64)

    filled = counts > 0
    # floor(sum / count + 0.5) без потери точности на float
    updated[filled] = (2 * sums[filled] + counts[filled, None]) // (2 * counts[filled, None])

    if not filled.all():
        logger.debug("Пустые кластеры %s сохраняют прежние центроиды", np.flatnonzero(~filled).tolist())
    return updated


class ColorQuantizer:
    """Подбирает k представительных цветов для набора RGB-сэмплов."""

    def __init__(self, rng: random.Random | None = None, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if max_iterations < 1:
            raise ValueError("max_iterations должно быть положительным")
        self.rng = rng or random.Random()
        self.max_iterations = max_iterations

    def cluster(self, k: int, samples) -> list[tuple[int, int, int]]:
        """Возвращает ровно k центроидов в виде кортежей (r, g, b)."""
        _check_k(k)
        points = _as_points(samples)
        centroids = np.array(generate_initial_centroids(k, points, self.rng), dtype=np.int64)

        for iteration in range(1, self.max_iterations + 1):
            labels = assign_clusters(points, centroids)
            new_centroids = update_centroids(points, labels, centroids)

            converged = set(_as_tuples(new_centroids)) == set(_as_tuples(centroids))
            centroids = new_centroids
            if converged:
                logger.debug("k-means сошёлся за %d итераций (k=%d, n=%d)", iteration, k, points.shape[0])
                break
        else:
            logger.warning(
                "k-means не сошёлся за %d итераций, возвращается текущий результат",
                self.max_iterations,
            )

        return _as_tuples(centroids)


def cluster(k: int, samples, rng: random.Random | None = None, max_iterations: int = DEFAULT_MAX_ITERATIONS):
    """Сокращение для ColorQuantizer(rng, max_iterations).cluster(k, samples)."""
    return ColorQuantizer(rng=rng, max_iterations=max_iterations).cluster(k, samples)
