import pandas as pd
from functools import cached_property
from keyword import iskeyword
from composable.connections import WhitespaceDataSource

class WhitespaceData(WhitespaceDataSource):
    def __init__(self):
        with self.csv_path.open('r', encoding='utf-8') as f:
            data = pd.read_csv(f, dtype=str)
            data['codepoint'] = data['codepoint'].map(lambda code: int(code, 16))
            for column in data.columns:
                if not iskeyword(column):
                    setattr(self, column, data[column])

    @cached_property
    def codepoints(self) -> frozenset:
        return frozenset(int(code) for code in self.codepoint)

    @cached_property
    def code_to_name(self):
        return dict(zip(map(int, self.codepoint), self.name))
