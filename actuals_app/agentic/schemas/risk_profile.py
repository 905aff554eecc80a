from pydantic import BaseModel


class ToolRiskProfile(BaseModel):
    '''
    衡量一个工具风险的结构化数据模型

    modifies_persistent_data	是否修改持久化数据
    deletes_data	是否删除数据
    affects_multiple_records	是否影响多条记录（新增条目会同时重写 actuals）
    '''
    modifies_persistent_data: bool = False
    deletes_data: bool = False
    affects_multiple_records: bool = False
