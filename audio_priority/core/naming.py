"""
Сравнение имен устройств и чистые операции над списком приоритетов

Имя устройства - единственный устойчивый идентификатор между переподключениями,
поэтому все сравнения идут через normalize_device_name.
"""

from typing import Iterable, List, Optional


def normalize_device_name(name: str) -> str:
    """Ключ сравнения имени устройства (без учета регистра)"""
    return name.casefold()


def names_equal(left: str, right: str) -> bool:
    return normalize_device_name(left) == normalize_device_name(right)


def index_of_name(priority_list: List[str], name: str) -> int:
    """Индекс имени в списке или -1"""
    key = normalize_device_name(name)
    for index, candidate in enumerate(priority_list):
        if normalize_device_name(candidate) == key:
            return index
    return -1


def contains_name(priority_list: List[str], name: str) -> bool:
    return index_of_name(priority_list, name) != -1


def priority_rank(priority_list: List[str], name: str) -> Optional[int]:
    """Ранг (1 - высший) или None, если имени нет в списке"""
    index = index_of_name(priority_list, name)
    return index + 1 if index != -1 else None


def dedupe_names(names: Iterable[str]) -> List[str]:
    """Убирает повторы без учета регистра, сохраняя первое вхождение"""
    seen = set()
    result = []
    for name in names:
        key = normalize_device_name(name)
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


def set_top(priority_list: List[str], name: str) -> List[str]:
    index = index_of_name(priority_list, name)
    if index == -1:
        return list(priority_list)
    entry = priority_list[index]
    return [entry] + [n for n in priority_list if not names_equal(n, name)]


def move_up(priority_list: List[str], name: str) -> List[str]:
    new_list = list(priority_list)
    index = index_of_name(new_list, name)
    if index > 0:
        new_list[index - 1], new_list[index] = new_list[index], new_list[index - 1]
    return new_list


def move_down(priority_list: List[str], name: str) -> List[str]:
    new_list = list(priority_list)
    index = index_of_name(new_list, name)
    if index != -1 and index < len(new_list) - 1:
        new_list[index], new_list[index + 1] = new_list[index + 1], new_list[index]
    return new_list


def move_to_bottom(priority_list: List[str], name: str) -> List[str]:
    index = index_of_name(priority_list, name)
    if index == -1:
        return list(priority_list)
    entry = priority_list[index]
    return [n for n in priority_list if not names_equal(n, name)] + [entry]


def remove_name(priority_list: List[str], name: str) -> List[str]:
    return [n for n in priority_list if not names_equal(n, name)]
