from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
