"""
Тесты для операций над списком приоритетов
"""

import unittest

from audio_priority.core import naming


class TestNameMatching(unittest.TestCase):
    """Тесты сравнения имен без учета регистра"""

    def test_names_equal_ignores_case(self):
        """Тест сравнения имен в разном регистре"""
        self.assertTrue(naming.names_equal("AirPods Pro", "airpods pro"))
        self.assertFalse(naming.names_equal("AirPods Pro", "AirPods Max"))

    def test_priority_rank(self):
        """Тест вычисления ранга"""
        priority_list = ["AirPods Pro", "USB Mic", "MacBook Pro Speakers"]
        self.assertEqual(naming.priority_rank(priority_list, "airpods pro"), 1)
        self.assertEqual(naming.priority_rank(priority_list, "MACBOOK PRO SPEAKERS"), 3)
        self.assertIsNone(naming.priority_rank(priority_list, "HDMI"))

    def test_dedupe_keeps_first_spelling(self):
        """Тест удаления повторов с сохранением первого написания"""
        self.assertEqual(
            naming.dedupe_names(["USB Mic", "usb mic", "Built-in", "USB MIC"]),
            ["USB Mic", "Built-in"],
        )


class TestListOperations(unittest.TestCase):
    """Тесты перестановок"""

    def setUp(self):
        self.priority_list = ["A", "B", "C", "D"]

    def test_set_top(self):
        """Тест перемещения в начало"""
        self.assertEqual(naming.set_top(self.priority_list, "c"), ["C", "A", "B", "D"])

    def test_move_up_and_down(self):
        """Тест перемещения на одну позицию"""
        self.assertEqual(naming.move_up(self.priority_list, "C"), ["A", "C", "B", "D"])
        self.assertEqual(naming.move_down(self.priority_list, "B"), ["A", "C", "B", "D"])

    def test_boundaries_are_noops(self):
        """Тест операций на границах списка"""
        self.assertEqual(naming.move_up(self.priority_list, "A"), self.priority_list)
        self.assertEqual(naming.move_down(self.priority_list, "D"), self.priority_list)

    def test_move_to_bottom(self):
        """Тест перемещения в конец"""
        self.assertEqual(naming.move_to_bottom(self.priority_list, "a"), ["B", "C", "D", "A"])

    def test_remove(self):
        """Тест удаления"""
        self.assertEqual(naming.remove_name(self.priority_list, "b"), ["A", "C", "D"])

    def test_unknown_name_leaves_list_unchanged(self):
        """Тест операций с отсутствующим именем"""
        for operation in (naming.set_top, naming.move_up, naming.move_down,
                          naming.move_to_bottom, naming.remove_name):
            with self.subTest(operation=operation.__name__):
                self.assertEqual(operation(self.priority_list, "Z"), self.priority_list)

    def test_operations_do_not_mutate_input(self):
        """Тест неизменности исходного списка"""
        naming.move_up(self.priority_list, "D")
        naming.set_top(self.priority_list, "D")
        self.assertEqual(self.priority_list, ["A", "B", "C", "D"])

    def test_move_up_rank_monotonic(self):
        """Тест: ранг после move_up не больше прежнего"""
        for name in self.priority_list:
            with self.subTest(name=name):
                before = naming.priority_rank(self.priority_list, name)
                after = naming.priority_rank(naming.move_up(self.priority_list, name), name)
                self.assertLessEqual(after, before)


if __name__ == '__main__':
    unittest.main()
