"""Built-in teachers and sample feedback used when the dataset model is unavailable."""

from datetime import datetime, timezone
from typing import List, Optional

from models import FeedbackRecord, Teacher, TeacherCategory


AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def avatar_for(seed: str) -> str:
    return AVATAR_URL.format(seed=seed.replace(" ", ""))


def _teacher(id: str, name: str, subject: str, category: TeacherCategory, seed: str, syllabus: List[str]) -> Teacher:
    return Teacher(
        id=id,
        name=name,
        subject=subject,
        category=category,
        avatar_url=avatar_for(seed),
        syllabus=syllabus,
    )


FALLBACK_TEACHERS: List[Teacher] = [
    # School level
    _teacher("s1", "Mrs. Sunita Devi", "Grade 1: Basics", TeacherCategory.SCHOOL, "Sunita", [
        "Unit A: Alphabets & Phonics", "Unit B: Numbers 1-100", "Unit C: Basic Math",
        "Unit D: Colors & Shapes", "Unit E: Good Habits", "Unit F: My Family",
        "Unit G: Community Helpers", "Unit H: Safety Rules",
    ]),
    _teacher("s3", "Mrs. Geeta Verma", "Grade 10: Maths", TeacherCategory.SCHOOL, "Geeta", [
        "1. Real Numbers", "2. Polynomials", "3. Pair of Linear Eq.", "4. Quadratic Equations",
        "5. Arithmetic Progressions", "6. Triangles", "7. Coordinate Geometry",
        "8. Trigonometry Intro", "9. Applications of Trig", "10. Circles",
        "11. Areas related to Circles", "12. Surface Areas & Volumes", "13. Statistics",
        "14. Probability",
    ]),
    _teacher("s4", "Mr. H.C. Verma Clone", "Grade 12: Physics", TeacherCategory.SCHOOL, "HCV", [
        "1. Electric Charges & Fields", "2. Potential & Capacitance", "3. Current Electricity",
        "4. Moving Charges & Magnetism", "5. Magnetism & Matter", "6. Electromagnetic Induction",
        "7. Alternating Current", "8. Electromagnetic Waves", "9. Ray Optics", "10. Wave Optics",
        "11. Dual Nature of Matter", "12. Atoms", "13. Nuclei", "14. Semiconductors",
    ]),

    # University level
    _teacher("u1", "Prof. Feynman", "B.Sc Physics", TeacherCategory.UNIVERSITY, "Feynman", [
        "1. Mathematical Physics", "2. Classical Mechanics", "3. Special Relativity",
        "4. Quantum Mechanics I", "5. Thermodynamics", "6. Statistical Mechanics",
        "7. Electromagnetism", "8. Solid State Physics", "9. Nuclear Physics",
        "10. Particle Physics", "11. Electronics", "12. Advanced Quantum Mech",
    ]),

    # Professional / programming languages
    _teacher("p_python", "Ms. Aditi Rao", "Python Programming", TeacherCategory.PROFESSIONAL, "Aditi", [
        "1. Python Intro & Setup", "2. Variables & Data Types", "3. Operators & Expressions",
        "4. Control Flow (If/Else)", "5. Loops (For/While)", "6. Functions & Lambdas",
        "7. Lists & Tuples", "8. Sets & Dictionaries", "9. String Manipulation",
        "10. File Handling", "11. Modules & Packages", "12. OOP: Classes & Objects",
        "13. OOP: Inheritance", "14. Exception Handling", "15. Iterators & Generators",
        "16. Decorators & Context Managers", "17. Regular Expressions",
        "18. Intro to NumPy/Pandas", "19. Web Scraping Basics", "20. Final Project: Automation Bot",
    ]),
    _teacher("p_java", "Mr. James G.", "Java Language", TeacherCategory.PROFESSIONAL, "Java", [
        "1. Java Environment & JVM", "2. Variables & Data Types", "3. Operators & Control Flow",
        "4. Loops & Arrays", "5. OOP: Classes & Objects", "6. OOP: Inheritance & Poly",
        "7. OOP: Encapsulation & Abstraction", "8. Interfaces & Packages", "9. Exception Handling",
        "10. Strings & StringBuilders", "11. Multithreading Basics", "12. Java I/O Streams",
        "13. Collections Framework", "14. Generics", "15. Lambda Expressions", "16. Stream API",
        "17. JDBC Database Connectivity", "18. Final Project: Management System",
    ]),
    _teacher("p_js", "Mr. Tanay Gupta", "JavaScript & Web", TeacherCategory.PROFESSIONAL, "Tanay", [
        "1. JS Intro & Engine", "2. Variables (let/const/var)", "3. Data Types & Operators",
        "4. Control Flow & Loops", "5. Functions (Arrow/Declarations)", "6. Objects & Arrays",
        "7. ES6+ Features", "8. DOM Manipulation", "9. Events & Listeners",
        "10. Async JS: Callbacks", "11. Promises & Async/Await", "12. Fetch API & JSON",
        "13. LocalStorage & SessionStorage", "14. Modules (Import/Export)", "15. Error Handling",
        "16. Closures & 'this' keyword", "17. Prototypes & Classes", "18. Final Project: Interactive App",
    ]),
    _teacher("p_cpp", "Mr. Bjarne S.", "C++ Programming", TeacherCategory.PROFESSIONAL, "CPP", [
        "1. C++ Basics & Setup", "2. Input/Output (cin/cout)", "3. Variables & Data Types",
        "4. Control Structures", "5. Functions & Recursion", "6. Arrays & Strings",
        "7. Pointers & References", "8. Dynamic Memory (new/delete)", "9. OOP: Classes & Objects",
        "10. OOP: Constructors/Destructors", "11. Operator Overloading", "12. OOP: Inheritance",
        "13. OOP: Polymorphism & Virtual Functions", "14. Templates & Generics",
        "15. Exception Handling", "16. STL: Vectors & Lists", "17. STL: Maps & Sets",
        "18. File Handling", "19. Final Project: Banking System",
    ]),
    _teacher("p_go", "Mr. Gopher", "Go (Golang)", TeacherCategory.PROFESSIONAL, "Go", [
        "1. Go Intro & Workspace", "2. Variables & Constants", "3. Data Types & Zero Values",
        "4. Control Structures (If/Switch)", "5. Loops", "6. Functions & Multiple Returns",
        "7. Arrays & Slices", "8. Maps", "9. Pointers in Go", "10. Structs & Embedding",
        "11. Interfaces", "12. Error Handling (Panic/Recover)", "13. Goroutines",
        "14. Channels", "15. Select Statement", "16. Modules & Packages", "17. Testing in Go",
        "18. Final Project: Web Server",
    ]),
    _teacher("p_sql", "Mr. Sequel", "SQL & Databases", TeacherCategory.PROFESSIONAL, "SQL", [
        "1. Database Concepts (RDBMS)", "2. SQL Syntax & Data Types", "3. CREATE & DROP Tables",
        "4. INSERT, UPDATE, DELETE", "5. SELECT Fundamentals", "6. Filtering (WHERE, AND, OR)",
        "7. Sorting & Limiting", "8. Aggregate Functions", "9. GROUP BY & HAVING",
        "10. Joins: INNER JOIN", "11. Joins: LEFT/RIGHT/FULL", "12. Subqueries",
        "13. Constraints (PK, FK, Unique)", "14. Indexes & Performance", "15. Views",
        "16. Stored Procedures Intro", "17. Transactions (ACID)", "18. Final Project: E-commerce DB",
    ]),
]


def professional_teachers() -> List[Teacher]:
    return [t for t in FALLBACK_TEACHERS if t.category == TeacherCategory.PROFESSIONAL]


def fallback_feedback(now: Optional[datetime] = None) -> List[FeedbackRecord]:
    """Sample feedback, stamped with ``now`` (defaults to the current UTC time)."""
    now = now or datetime.now(timezone.utc)
    samples = [
        ("f1", "s1", 10, "My daughter loves the way she teaches counting!", 0.9, ["Engagement", "Care"], "h1"),
        ("f2", "p_python", 9, "Python concepts explained beautifully.", 0.8, ["Clarity", "Knowledge"], "h2"),
        ("f3", "p_js", 5, "React hooks are still confusing.", -0.2, ["Clarity"], "h3"),
        ("f4", "p_java", 8, "Java course is very comprehensive.", 0.7, ["Content"], "h4"),
    ]
    return [
        FeedbackRecord(
            id=id,
            teacher_id=teacher_id,
            student_hash=student_hash,
            timestamp=now,
            numeric_rating=rating,
            comment=comment,
            sentiment_score=sentiment,
            topics=topics,
            is_flagged=False,
        )
        for id, teacher_id, rating, comment, sentiment, topics, student_hash in samples
    ]
