"""
Ядро приоритетов аудио устройств: типы, хранение, сведение, кэш-гейт
"""
